"""
Bounded attempt tracking for key creation.

State: (attempt count, last error). Each recorded outcome moves the
tracker to SUCCESS, RETRY or EXHAUSTED.
"""

from enum import Enum
from typing import Optional


class AttemptOutcome(Enum):
    """Result of recording one insert attempt"""
    SUCCESS = "success"
    RETRY = "retry"
    EXHAUSTED = "exhausted"


class KeyAttempts:
    """
    Tracks insert attempts for a single create request.

    Example:
        attempts = KeyAttempts(max_attempts=5)
        while True:
            try:
                insert()
            except IntegrityError as e:
                if attempts.record_failure(e) is AttemptOutcome.EXHAUSTED:
                    raise
                continue
            attempts.record_success()
            break
    """

    def __init__(self, max_attempts: int = 5):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.attempt = 0
        self.last_error: Optional[BaseException] = None
        self.outcome: Optional[AttemptOutcome] = None

    @property
    def remaining(self) -> int:
        return self.max_attempts - self.attempt

    def record_success(self) -> AttemptOutcome:
        self._ensure_open()
        self.attempt += 1
        self.outcome = AttemptOutcome.SUCCESS
        return self.outcome

    def record_failure(self, error: BaseException) -> AttemptOutcome:
        self._ensure_open()
        self.attempt += 1
        self.last_error = error
        if self.attempt >= self.max_attempts:
            self.outcome = AttemptOutcome.EXHAUSTED
        else:
            self.outcome = AttemptOutcome.RETRY
        return self.outcome

    def _ensure_open(self) -> None:
        if self.outcome in (AttemptOutcome.SUCCESS, AttemptOutcome.EXHAUSTED):
            raise RuntimeError(f"Attempts already finished with {self.outcome.value}")
