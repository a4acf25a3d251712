"""String-to-native value conversion for bound fields."""

import re
from enum import Enum
from typing import Any

from confmerge.errors import ParseError

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

TRUE_LITERALS: frozenset[str] = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_LITERALS: frozenset[str] = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class FieldKind(str, Enum):
    """Native kind of a leaf field, as far as binding is concerned."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OTHER = "other"

    @classmethod
    def from_annotation(cls, annotation: Any) -> "FieldKind":
        # bool is an int subclass, so match exact types only
        if annotation is str:
            return cls.STRING
        if annotation is bool:
            return cls.BOOLEAN
        if annotation is int:
            return cls.INTEGER
        return cls.OTHER


class _Skip:
    """Marker returned for kinds the binder does not write."""

    def __repr__(self) -> str:
        return "SKIP"


SKIP = _Skip()


def parse_int(value: str) -> int:
    """Parse a base-10 signed integer.

    Whitespace, underscores and prefixes such as ``0x`` are rejected.
    """
    if not _INT_PATTERN.fullmatch(value):
        raise ParseError(f"invalid integer literal: {value!r}", value=value)
    return int(value, 10)


def parse_bool(value: str) -> bool:
    """Parse a conventional boolean literal (true/false/1/0/t/f...)."""
    if value in TRUE_LITERALS:
        return True
    if value in FALSE_LITERALS:
        return False
    raise ParseError(f"invalid boolean literal: {value!r}", value=value)


def convert(kind: FieldKind, value: str) -> Any:
    """Convert a raw string into the native value for ``kind``.

    Returns SKIP for kinds without binding support (floats included).
    """
    if kind is FieldKind.STRING:
        return value
    if kind is FieldKind.INTEGER:
        return parse_int(value)
    if kind is FieldKind.BOOLEAN:
        return parse_bool(value)
    return SKIP
