"""Observability helpers for confmerge."""

from confmerge.observability.logging import SecretRedactor, get_logger, setup_logging

__all__ = ["SecretRedactor", "get_logger", "setup_logging"]
