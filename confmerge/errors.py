"""Exception hierarchy for configuration merging.

All errors raised by confmerge inherit from ConfmergeError so callers can
catch the whole family at once:

- TargetTypeError: the merge target is not a mutable pydantic model instance
- SchemaError: a field carries a malformed tag
- ParseError: a source value could not be converted to the field type
- LoadError: one or more sources failed during a load pass
- RequiredFieldError: required fields are still unset after loading
- LifecycleError: the merger was driven in an invalid order
"""

from typing import Any


class ConfmergeError(Exception):
    """Base exception for all confmerge errors."""

    pass


class TargetTypeError(ConfmergeError, TypeError):
    """Raised when the merge target is not a mutable record instance."""

    def __init__(self, target: Any) -> None:
        self.target = target
        super().__init__(
            "target must be a mutable pydantic model instance, "
            f"received [{type(target).__name__}]"
        )


class SchemaError(ConfmergeError):
    """Raised when a configuration model declares an invalid tag."""

    pass


class ParseError(ConfmergeError, ValueError):
    """Raised when a value cannot be converted to the field's type."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        variable: str | None = None,
        value: str | None = None,
    ) -> None:
        self.field = field
        self.variable = variable
        self.value = value
        super().__init__(message)


class LoadError(ConfmergeError):
    """Aggregate of every error produced during one load pass."""

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        lines = [f"{count} {noun} occurred:"]
        lines.extend(f"\t* {err}" for err in self.errors)
        return "\n".join(lines)


class RequiredFieldError(ConfmergeError):
    """Raised when required fields remain unset after defaults are applied."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"required fields are not set: {', '.join(self.fields)}")


class LifecycleError(ConfmergeError):
    """Raised when merger or source operations are called out of order."""

    pass


class WatchNotActiveError(LifecycleError):
    """Raised when stopping a watch session that is not running."""

    pass


class WatchAlreadyActiveError(LifecycleError):
    """Raised when starting a watch session while one is running."""

    pass


class SourceNotBoundError(LifecycleError):
    """Raised when a source is loaded before receiving its target."""

    pass
