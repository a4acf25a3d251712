"""Human-readable rendering of configuration models.

Fields tagged ``show_last_symbols`` are masked so that only their last N
characters remain visible:

    AppConfig
      port: 8080
      database:
        password: ******42
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from confmerge.schema import build_schema

INDENT = "  "


def mask_string(value: str, show_last: int) -> str:
    """Replace all but the last ``show_last`` characters with ``*``."""
    if show_last >= len(value):
        return value
    if show_last <= 0:
        return "*" * len(value)
    return "*" * (len(value) - show_last) + value[-show_last:]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _render_mapping(data: Mapping[Any, Any], offset: str, lines: list[str]) -> None:
    for key, value in data.items():
        if isinstance(value, Mapping):
            lines.append(f"{offset}{key}:")
            _render_mapping(value, offset + INDENT, lines)
        else:
            lines.append(f"{offset}{key}: {_scalar(value)}")


def _render_model(
    model: BaseModel,
    masks: Mapping[str, int],
    prefix: str,
    offset: str,
    lines: list[str],
) -> None:
    for name in type(model).model_fields:
        value = getattr(model, name)
        dotted = f"{prefix}{name}"
        if isinstance(value, BaseModel):
            lines.append(f"{offset}{name}:")
            _render_model(value, masks, f"{dotted}.", offset + INDENT, lines)
        elif isinstance(value, Mapping):
            lines.append(f"{offset}{name}:")
            _render_mapping(value, offset + INDENT, lines)
        elif dotted in masks:
            lines.append(f"{offset}{name}: {mask_string(_scalar(value), masks[dotted])}")
        else:
            lines.append(f"{offset}{name}: {_scalar(value)}")


def render_config(target: BaseModel) -> str:
    """Render ``target`` as an indented tree, masking tagged fields."""
    masks = {
        spec.dotted: spec.show_last_symbols
        for spec in build_schema(type(target))
        if spec.show_last_symbols is not None
    }
    lines = [type(target).__name__]
    _render_model(target, masks, "", INDENT, lines)
    return "\n".join(lines)
