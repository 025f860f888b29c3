"""Raw measurement records."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Sample:
    """One timed operation."""

    operation: str
    elapsed_ms: float
    captured_at: datetime


@dataclass(frozen=True)
class ErrorRecord:
    """A failed operation as seen by the accumulator."""

    operation: str
    message: str
    captured_at: datetime
