"""Root settings model for confmerge's own behaviour."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from confmerge.config.models.observability import LoggingConfig
from confmerge.config.models.watch import ProbeConfig, WatchConfig


class Settings(BaseSettings):
    """Library settings, read from CONFMERGE_* environment variables.

    Nested sections use ``__`` as delimiter, e.g.
    ``CONFMERGE_WATCH__POLL_INTERVAL=0.5``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONFMERGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    watch: WatchConfig = Field(
        default_factory=WatchConfig,
        description="Watch session configuration",
    )
    probe: ProbeConfig = Field(
        default_factory=ProbeConfig,
        description="Reachability probe configuration",
    )
