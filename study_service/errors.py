"""
Typed failures raised by the study service core and its collaborators.

Quota exhaustion is reported through EntitlementResult, not by raising;
QuotaExceededError only signals that usage was recorded without a passing
check.
"""

from typing import Optional


class QuizzifyError(Exception):
    """Base class for all study service errors."""

    category = "error"


class InputValidationError(QuizzifyError, ValueError):
    """Request or payload rejected before any work was done."""

    category = "invalid_input"


class GenerationFailedError(QuizzifyError):
    """The AI gateway failed or returned content we could not use."""

    category = "generation_failed"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TemporarilyUnavailableError(GenerationFailedError):
    """The AI gateway refused the call for rate or credit reasons (429/402)."""

    category = "temporarily_unavailable"


class SaveFailedError(QuizzifyError):
    """A store write did not complete; nothing was committed."""

    category = "save_failed"


class QuotaExceededError(QuizzifyError):
    """Usage was recorded for an action the gate does not permit."""

    category = "quota_exceeded"


class StoreUnavailableError(QuizzifyError):
    """A store file exists but could not be read."""

    category = "store_unavailable"


class RecordNotFoundError(QuizzifyError, LookupError):
    """A quiz, deck or card id that does not exist for the account."""

    category = "not_found"
