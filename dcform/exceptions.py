"""Exception classes for dcform.

Validators and rules report problems as outcomes and never raise. The
exceptions below are reserved for configuration I/O and for callers that
break a documented precondition.
"""


class DcformError(Exception):
    """Base exception for dcform errors."""

    pass


class ConfigError(DcformError, ValueError):
    """Raised when configuration cannot be loaded or converted."""

    def __init__(self, message: str, path: str | None = None):
        """Initialize with message and optional file path."""
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class DateCodecError(DcformError, ValueError):
    """Raised when a date entry cannot be serialized."""

    pass


class SchedulerDisposedError(DcformError, RuntimeError):
    """Raised when scheduling on a timer that has been disposed."""

    def __init__(self) -> None:
        super().__init__("Cannot schedule on a disposed debounce timer")
