"""Tag binder: assigns source values to tagged fields.

The binder walks the cached schema of a target model. For every leaf whose
tag (under the source's tag key) names a variable the source is authorized
to bind, the raw string is converted to the field's native kind and
assigned in place. Nested records are always traversed.
"""

from collections.abc import Callable, Collection
from typing import Any

from pydantic import BaseModel

from confmerge.convert import SKIP, FieldKind, convert, parse_bool, parse_int
from confmerge.errors import ParseError, RequiredFieldError
from confmerge.observability.logging import get_logger
from confmerge.schema import build_schema, read_value, write_value

__all__ = [
    "apply_defaults",
    "bind_fields",
    "check_required",
    "convert",
    "is_zero",
    "parse_bool",
    "parse_int",
]

logger = get_logger(__name__)

Lookup = Callable[[str], str | None]


def bind_fields(
    target: BaseModel,
    tag_key: str,
    authorized: Collection[str],
    lookup: Lookup,
) -> int:
    """Bind every authorized, tagged leaf of ``target`` from ``lookup``.

    Args:
        target: Configuration model instance, mutated in place
        tag_key: Tag naming the variable for this source (e.g. "env")
        authorized: Variable names this invocation may bind
        lookup: Returns the raw value of a variable, or None when absent

    Returns:
        Number of fields assigned

    Raises:
        ParseError: On the first value that cannot be converted; fields bound
            before the failure keep their new values
    """
    schema = build_schema(type(target))
    assigned = 0
    for spec in schema.tagged(tag_key):
        variable = spec.tag(tag_key)
        if variable not in authorized:
            continue
        raw = lookup(variable)
        if raw is None:
            continue
        try:
            value = convert(spec.kind, raw)
        except ParseError as e:
            raise ParseError(
                f"field {spec.dotted}: cannot bind {variable}={raw!r} as {spec.kind.value}",
                field=spec.dotted,
                variable=variable,
                value=raw,
            ) from e
        if value is SKIP:
            continue
        write_value(target, spec, value)
        assigned += 1
    return assigned


def is_zero(value: Any) -> bool:
    """Whether a field value is still at its zero/unset state."""
    if value is None or value is False:
        return True
    if isinstance(value, (str, int, float, list, tuple, dict, set, frozenset)):
        return not value
    return False


def apply_defaults(target: BaseModel) -> list[str]:
    """Assign ``default`` tags to zero-valued fields.

    Returns:
        Dotted paths of the fields that received their default
    """
    applied: list[str] = []
    for spec in build_schema(type(target)):
        default = spec.default
        if default is None or spec.kind is FieldKind.OTHER:
            continue
        if not is_zero(read_value(target, spec)):
            continue
        write_value(target, spec, convert(spec.kind, default))
        applied.append(spec.dotted)
    if applied:
        logger.debug("defaults_applied", fields=applied)
    return applied


def check_required(target: BaseModel) -> None:
    """Raise RequiredFieldError listing every required field still unset."""
    missing = [
        spec.dotted
        for spec in build_schema(type(target))
        if spec.required and is_zero(read_value(target, spec))
    ]
    if missing:
        raise RequiredFieldError(missing)
