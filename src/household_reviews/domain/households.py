"""Household domain model for periodic financial review tracking."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal

from household_reviews.domain.value_objects import (
    Priority,
    ReviewType,
    Segment,
    Theme,
)

DOCUMENT_VERSION = "1.1.0"


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Person:
    """A member of a household."""

    name: str
    role: str = ""
    date_of_birth: date | None = None


@dataclass
class Household:
    """A household under review.

    Review status is not stored here; it is derived from the dates on every
    read (see services.lifecycle.derive_status).
    """

    name: str
    members: list[Person]
    next_review_date: date | None
    id: int = 0  # assigned by the store
    segment: Segment = Segment.GREEN
    priority: Priority = Priority.STANDARD
    review_type: ReviewType = ReviewType.PERIODIC
    last_completed_date: date | None = None
    notes: str = ""
    auc: Decimal = Decimal("0")
    assigned_month: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @property
    def member_names(self) -> list[str]:
        return [member.name for member in self.members]

    def touch(self) -> None:
        self.updated_at = _utc_now()


@dataclass
class WorkspaceSettings:
    """Process-wide settings persisted alongside the households."""

    last_file_path: str | None = None
    theme: Theme = Theme.LIGHT
    auto_backup: bool = True
    backup_count: int = 10


__all__ = [
    "DOCUMENT_VERSION",
    "Household",
    "Person",
    "WorkspaceSettings",
]
