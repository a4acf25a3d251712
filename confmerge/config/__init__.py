"""Settings for confmerge itself.

These settings tune the library (logging, watch polling, probe timing);
they are unrelated to the configuration models that confmerge merges.

Usage:
    from confmerge.config import get_settings

    settings = get_settings()
    interval = settings.watch.poll_interval
"""

from functools import lru_cache

from confmerge.config.settings import Settings
from confmerge.observability.logging import setup_logging


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    """
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog from the logging settings section."""
    section = (settings or get_settings()).logging
    setup_logging(
        level=section.level,
        format=section.format,
        redact_secrets=section.redact_secrets,
    )


__all__ = ["Settings", "configure_logging", "get_settings", "reload_settings"]
