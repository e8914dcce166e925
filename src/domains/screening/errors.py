"""Screening error taxonomy.

Only InvalidSubjectError ever reaches the caller of a screening. Adapter
errors are caught by the fan-out executor and recorded on the source result.
"""


class ScreeningError(Exception):
    """Base class for screening errors."""


class InvalidSubjectError(ScreeningError, ValueError):
    """The subject cannot be screened (empty name, malformed address)."""


class AdapterTimeoutError(ScreeningError):
    """A source did not answer within its timeout."""

    def __init__(self, source: str, timeout_ms: int) -> None:
        super().__init__(f"{source} timed out after {timeout_ms} ms")
        self.source = source
        self.timeout_ms = timeout_ms


class AdapterFailureError(ScreeningError):
    """A source answered with an error or an unusable payload."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
