"""Subject screening domain."""

from .config import ScreeningConfig
from .errors import (
    AdapterFailureError,
    AdapterTimeoutError,
    InvalidSubjectError,
    ScreeningError,
)
from .executor import FanOutExecutor, SourceSlot
from .models import ScreeningResult, SourceResult, SourceStatus, Subject, SubjectKind
from .service import ScreeningService
from .subject import detect_wallet, parse_subject

__all__ = [
    "AdapterFailureError",
    "AdapterTimeoutError",
    "FanOutExecutor",
    "InvalidSubjectError",
    "ScreeningConfig",
    "ScreeningError",
    "ScreeningResult",
    "ScreeningService",
    "SourceResult",
    "SourceSlot",
    "SourceStatus",
    "Subject",
    "SubjectKind",
    "detect_wallet",
    "parse_subject",
]
