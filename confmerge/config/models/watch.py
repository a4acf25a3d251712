"""Watch session and reachability probe configuration models."""

from pydantic import BaseModel, Field


class WatchConfig(BaseModel):
    """Defaults for file-backed sources while watching."""

    poll_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between file change checks",
    )


class ProbeConfig(BaseModel):
    """Reachability probe configuration.

    The probe interval is ``timeout * tick_seconds``.
    """

    tick_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Seconds per timeout unit",
    )
