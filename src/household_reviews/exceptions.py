"""Exception hierarchy for the household review tracker.

All domain-specific exceptions inherit from HouseholdReviewError so callers
at the UI or CLI boundary can catch every recoverable error with one clause
while still telling validation, lookup, storage and format problems apart.
"""

from pathlib import Path
from typing import Any


class HouseholdReviewError(Exception):
    """Base exception for all household review errors.

    Includes an error_code for boundary reporting and extra context.
    """

    error_code: str = "HRV_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for user-facing reports."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(HouseholdReviewError):
    """Raised when input has the wrong shape or values. The store is unchanged."""

    error_code = "VALIDATION_ERROR"


class InvalidFieldError(ValidationError):
    """Raised when a single household field fails validation."""

    error_code = "INVALID_FIELD"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            f"Invalid value for '{field}': {reason}",
            context={"field": field, "reason": reason},
        )


class InvalidAdvanceDateError(ValidationError):
    """Raised when a custom next review date is not strictly after today."""

    error_code = "INVALID_ADVANCE_DATE"

    def __init__(self, next_date: str, today: str) -> None:
        super().__init__(
            f"Next review date {next_date} must be after {today}",
            context={"next_date": next_date, "today": today},
        )


# =============================================================================
# Lookup Errors
# =============================================================================


class NotFoundError(HouseholdReviewError):
    """Base exception for unknown identifiers."""

    error_code = "NOT_FOUND"


class HouseholdNotFoundError(NotFoundError):
    """Raised when a household id is not in the store."""

    error_code = "HOUSEHOLD_NOT_FOUND"

    def __init__(self, household_id: int) -> None:
        super().__init__(
            f"Household not found: {household_id}",
            context={"household_id": household_id},
        )
        self.household_id = household_id


class BackupNotFoundError(NotFoundError):
    """Raised when a backup file does not exist."""

    error_code = "BACKUP_NOT_FOUND"

    def __init__(self, path: Path | str) -> None:
        super().__init__(
            f"Backup file does not exist: {path}",
            context={"path": str(path)},
        )


# =============================================================================
# Storage Errors
# =============================================================================


class StorageIOError(HouseholdReviewError, OSError):
    """Raised when saving, backing up or reading a workspace file fails.

    Non-fatal: in-memory state is always preserved.
    """

    error_code = "STORAGE_IO_ERROR"

    def __init__(self, operation: str, path: Path | str, reason: str) -> None:
        super().__init__(
            f"Failed to {operation} {path}: {reason}",
            context={"operation": operation, "path": str(path), "reason": reason},
        )


class FormatError(HouseholdReviewError):
    """Raised when a workspace document is corrupt or has an incompatible schema.

    The load is aborted and existing in-memory state remains untouched.
    """

    error_code = "FORMAT_ERROR"

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(
            f"Invalid workspace file {path}: {reason}",
            context={"path": str(path), "reason": reason},
        )
