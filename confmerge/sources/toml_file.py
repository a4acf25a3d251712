"""Source backed by a TOML document."""

import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from confmerge.binder import Lookup
from confmerge.sources.base import ChangeHandler, FileSource


def _lookup_path(document: dict[str, Any], dotted: str) -> Any:
    node: Any = document
    for segment in dotted.split("."):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node


def _scalar_text(value: Any) -> str | None:
    """TOML scalars as the strings the binder expects; None for anything else."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


class TomlSource(FileSource):
    """Binds ``toml``-tagged fields from a TOML file.

    A tag value is a dotted key into the document, e.g.
    ``bind(0, toml="server.port")`` reads ``[server] port = 8080``.
    Tables, arrays and dates are not bound.

    Raises:
        FileNotFoundError: From ``load`` when the file does not exist
        tomllib.TOMLDecodeError: From ``load`` when the syntax is invalid
    """

    def __init__(
        self,
        path: str | Path,
        keys: Iterable[str],
        *,
        tag_key: str = "toml",
        poll_interval: float | None = None,
        on_change: ChangeHandler | None = None,
    ) -> None:
        super().__init__(
            path,
            keys,
            tag_key=tag_key,
            poll_interval=poll_interval,
            on_change=on_change,
        )

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.path}")
        with self.path.open("rb") as f:
            return tomllib.load(f)

    def _read(self) -> Lookup:
        document = self.read()
        return lambda key: _scalar_text(_lookup_path(document, key))
