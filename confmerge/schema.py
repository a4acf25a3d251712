"""Field descriptor tables for configuration models.

A configuration model is a plain pydantic model whose leaf fields carry
tags in ``json_schema_extra``:

    class Database(BaseModel):
        host: str = bind("", env="DB_HOST", default="localhost")
        password: str = bind("", env="DB_PASSWORD", required=True, show_last_symbols=2)

    class AppConfig(BaseModel):
        port: int = bind(0, env="PORT", default=8080)
        database: Database = Field(default_factory=Database)

The schema for a model class is computed once and cached, so binding walks
a flat table of leaves instead of introspecting the model on every load.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field

from confmerge.convert import SKIP, FieldKind, convert, parse_bool, parse_int
from confmerge.errors import ParseError, SchemaError

REQUIRED_TAG = "required"
DEFAULT_TAG = "default"
MASK_TAG = "show_last_symbols"

RESERVED_TAGS: frozenset[str] = frozenset({REQUIRED_TAG, DEFAULT_TAG, MASK_TAG})


def _tag_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def bind(zero: Any, *, description: str | None = None, **tags: Any) -> Any:
    """Declare a tagged configuration field.

    Args:
        zero: Value the field holds before any source binds it
        description: Optional field description
        **tags: Tag key/value pairs; values are stored as strings

    Returns:
        A pydantic field definition
    """
    extra = {key: _tag_value(value) for key, value in tags.items()}
    return Field(default=zero, description=description, json_schema_extra=extra)


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor for one leaf field of a configuration model."""

    path: tuple[str, ...]
    kind: FieldKind
    tags: Mapping[str, str]

    @property
    def name(self) -> str:
        return self.path[-1]

    @property
    def dotted(self) -> str:
        return ".".join(self.path)

    def tag(self, key: str) -> str | None:
        value = self.tags.get(key)
        return value or None

    @property
    def required(self) -> bool:
        raw = self.tag(REQUIRED_TAG)
        return parse_bool(raw) if raw is not None else False

    @property
    def default(self) -> str | None:
        return self.tags.get(DEFAULT_TAG)

    @property
    def show_last_symbols(self) -> int | None:
        raw = self.tag(MASK_TAG)
        return parse_int(raw) if raw is not None else None


@dataclass(frozen=True)
class ConfigSchema:
    """Ordered leaf descriptors of a configuration model."""

    model: type[BaseModel]
    leaves: tuple[FieldSpec, ...]

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.leaves)

    def __len__(self) -> int:
        return len(self.leaves)

    def tagged(self, tag_key: str) -> tuple[FieldSpec, ...]:
        """Leaves carrying a non-empty tag under ``tag_key``."""
        return tuple(spec for spec in self.leaves if spec.tag(tag_key) is not None)

    def get(self, dotted: str) -> FieldSpec | None:
        for spec in self.leaves:
            if spec.dotted == dotted:
                return spec
        return None


def _is_model_class(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _field_tags(model: type[BaseModel], name: str) -> dict[str, str]:
    extra = model.model_fields[name].json_schema_extra
    if extra is None:
        return {}
    if not isinstance(extra, dict):
        raise SchemaError(f"{model.__name__}.{name}: tags must be a mapping")
    return {key: _tag_value(value) for key, value in extra.items()}


def _check_tags(spec: FieldSpec) -> None:
    try:
        spec.required
    except ParseError as e:
        raise SchemaError(f"{spec.dotted}: invalid required tag: {e}") from e
    try:
        spec.show_last_symbols
    except ParseError as e:
        raise SchemaError(f"{spec.dotted}: invalid show_last_symbols tag: {e}") from e

    default = spec.default
    if default is not None and spec.kind is not FieldKind.OTHER:
        try:
            convert(spec.kind, default)
        except ParseError as e:
            raise SchemaError(f"{spec.dotted}: invalid default tag: {e}") from e


def _collect(
    model: type[BaseModel],
    prefix: tuple[str, ...],
    stack: tuple[type[BaseModel], ...],
) -> list[FieldSpec]:
    if model in stack:
        raise SchemaError(f"recursive configuration model: {model.__name__}")
    if model.model_config.get("frozen", False):
        raise SchemaError(f"configuration model must be mutable: {model.__name__}")

    leaves: list[FieldSpec] = []
    for name, info in model.model_fields.items():
        path = prefix + (name,)
        if _is_model_class(info.annotation):
            # Nested records are always traversed, tags or not
            leaves.extend(_collect(info.annotation, path, stack + (model,)))
            continue

        spec = FieldSpec(
            path=path,
            kind=FieldKind.from_annotation(info.annotation),
            tags=MappingProxyType(_field_tags(model, name)),
        )
        _check_tags(spec)
        leaves.append(spec)
    return leaves


@lru_cache(maxsize=None)
def build_schema(model: type[BaseModel]) -> ConfigSchema:
    """Build (once per class) the leaf descriptor table of a model.

    Raises:
        SchemaError: If the class is not a mutable pydantic model or a tag is invalid
    """
    if not _is_model_class(model):
        raise SchemaError(f"configuration model must be a pydantic model class, got {model!r}")
    return ConfigSchema(model=model, leaves=tuple(_collect(model, (), ())))


def resolve_parent(target: BaseModel, spec: FieldSpec) -> BaseModel:
    """Follow ``spec.path`` down to the record that owns the leaf."""
    record = target
    for segment in spec.path[:-1]:
        child = getattr(record, segment)
        if not isinstance(child, BaseModel):
            raise SchemaError(f"{spec.dotted}: nested record '{segment}' is not set")
        record = child
    return record


def read_value(target: BaseModel, spec: FieldSpec) -> Any:
    return getattr(resolve_parent(target, spec), spec.name)


def write_value(target: BaseModel, spec: FieldSpec, value: Any) -> None:
    if value is SKIP:
        return
    setattr(resolve_parent(target, spec), spec.name, value)
