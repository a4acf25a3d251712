"""Source backed by a ``.env`` file."""

from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from confmerge.binder import Lookup
from confmerge.sources.base import ChangeHandler, FileSource


class DotEnvSource(FileSource):
    """Binds ``env``-tagged fields from a dotenv file.

    The file is parsed with python-dotenv without touching ``os.environ``.
    A missing file binds nothing. Keys declared without a value
    (``KEY`` on its own line) are treated as absent.
    """

    def __init__(
        self,
        path: str | Path,
        variables: Iterable[str],
        *,
        tag_key: str = "env",
        poll_interval: float | None = None,
        on_change: ChangeHandler | None = None,
    ) -> None:
        super().__init__(
            path,
            variables,
            tag_key=tag_key,
            poll_interval=poll_interval,
            on_change=on_change,
        )

    def _read(self) -> Lookup:
        if not self.path.exists():
            return {}.get
        return dotenv_values(self.path).get
