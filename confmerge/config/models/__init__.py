"""Configuration model exports.

    from confmerge.config.models import WatchConfig, ProbeConfig
"""

from confmerge.config.models.observability import LoggingConfig
from confmerge.config.models.watch import ProbeConfig, WatchConfig

__all__ = [
    "LoggingConfig",
    "ProbeConfig",
    "WatchConfig",
]
