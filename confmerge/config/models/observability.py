"""Logging configuration model."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """Structured logging configuration."""

    level: LogLevel = Field(default="INFO", description="Minimum log level")
    format: LogFormat = Field(
        default="console",
        description="Output format: json for services, console for development",
    )
    redact_secrets: bool = Field(
        default=True,
        description="Redact sensitive keys from log events",
    )
