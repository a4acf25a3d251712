"""Configuration sources.

Every source implements the Source interface. Concrete sources:

- EnvSource: process environment
- DotEnvSource: ``.env`` files (python-dotenv)
- TomlSource: TOML documents
"""

from confmerge.sources.base import FileSource, Source, TaggedSource
from confmerge.sources.dotenv_file import DotEnvSource
from confmerge.sources.env import EnvSource
from confmerge.sources.toml_file import TomlSource

__all__ = [
    "DotEnvSource",
    "EnvSource",
    "FileSource",
    "Source",
    "TaggedSource",
    "TomlSource",
]
