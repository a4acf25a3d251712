"""Merge configuration from multiple sources into one typed model.

Usage:
    from pydantic import BaseModel
    from confmerge import EnvSource, Merger, bind

    class AppConfig(BaseModel):
        port: int = bind(0, env="PORT", default=8080)
        token: str = bind("", env="API_TOKEN", required=True, show_last_symbols=4)

    config = AppConfig()
    merger = Merger(config)
    merger.add_source(EnvSource(["PORT", "API_TOKEN"]))
    await merger.run()
"""

from confmerge.binder import apply_defaults, bind_fields, check_required
from confmerge.errors import (
    ConfmergeError,
    LifecycleError,
    LoadError,
    ParseError,
    RequiredFieldError,
    SchemaError,
    SourceNotBoundError,
    TargetTypeError,
    WatchAlreadyActiveError,
    WatchNotActiveError,
)
from confmerge.merger import Merger, MergerState
from confmerge.presenter import mask_string, render_config
from confmerge.schema import ConfigSchema, FieldSpec, bind, build_schema
from confmerge.sources import (
    DotEnvSource,
    EnvSource,
    FileSource,
    Source,
    TaggedSource,
    TomlSource,
)
from confmerge.sync import CancelToken, WaitGroup

__all__ = [
    "CancelToken",
    "ConfigSchema",
    "ConfmergeError",
    "DotEnvSource",
    "EnvSource",
    "FieldSpec",
    "FileSource",
    "LifecycleError",
    "LoadError",
    "Merger",
    "MergerState",
    "ParseError",
    "RequiredFieldError",
    "SchemaError",
    "Source",
    "SourceNotBoundError",
    "TaggedSource",
    "TargetTypeError",
    "TomlSource",
    "WaitGroup",
    "WatchAlreadyActiveError",
    "WatchNotActiveError",
    "apply_defaults",
    "bind",
    "bind_fields",
    "build_schema",
    "check_required",
    "mask_string",
    "render_config",
]
