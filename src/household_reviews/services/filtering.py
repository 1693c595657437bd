"""Filter/search index over the household store.

The index holds no state of its own: every call recomputes the visible ids
from the store's current records, so a deleted household can never show up.
Input debouncing belongs to the caller.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from household_reviews.domain.households import Household
from household_reviews.domain.value_objects import (
    Priority,
    ReviewStatus,
    ReviewType,
    Segment,
)
from household_reviews.repositories.memory import InMemoryHouseholdStore
from household_reviews.services.interfaces import CategoryFilter, FilterService
from household_reviews.services.lifecycle import derive_status


class QuickFilter(str, Enum):
    """Stat-card shortcuts."""

    ALL = "all"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    VIP = "vip"
    HIGH_PRIORITY = "high_priority"
    DUE_THIS_MONTH = "due_this_month"


@dataclass(frozen=True)
class ReviewStats:
    total: int
    scheduled: int
    completed: int
    overdue: int
    vip: int
    high_priority: int
    due_this_month: int

    @property
    def completion_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total


def parse_category(value: str | None) -> CategoryFilter | None:
    """Resolve a select-box value such as ``"Red"`` or ``"Overdue"``.

    Segment, review type and status values never collide, so the plain value
    is enough to identify the category.
    """
    if value is None or not value.strip() or value.strip().lower() == "all":
        return None
    text = value.strip().lower()
    for enum_type in (Segment, ReviewType, ReviewStatus):
        for member in enum_type:
            if member.value.lower() == text:
                return member
    raise ValueError(f"Unknown category filter: {value!r}")


def _due_this_month(household: Household, today: date) -> bool:
    due = household.next_review_date
    return due is not None and (due.year, due.month) == (today.year, today.month)


def matches_query(household: Household, query: str) -> bool:
    needle = query.strip().casefold()
    if not needle:
        return True
    haystacks = [household.name, *household.member_names]
    return any(needle in text.casefold() for text in haystacks)


def matches_category(
    household: Household, category: CategoryFilter | None, status: ReviewStatus
) -> bool:
    if category is None:
        return True
    if isinstance(category, Segment):
        return household.segment == category
    if isinstance(category, ReviewType):
        return household.review_type == category
    return status == category


def matches_quick(
    household: Household, quick: QuickFilter | None, status: ReviewStatus, today: date
) -> bool:
    if quick is None or quick == QuickFilter.ALL:
        return True
    if quick == QuickFilter.SCHEDULED:
        return status == ReviewStatus.SCHEDULED
    if quick == QuickFilter.COMPLETED:
        return status == ReviewStatus.COMPLETED
    if quick == QuickFilter.OVERDUE:
        return status == ReviewStatus.OVERDUE
    if quick == QuickFilter.VIP:
        return household.priority == Priority.VIP
    if quick == QuickFilter.HIGH_PRIORITY:
        return household.priority == Priority.HIGH
    return _due_this_month(household, today)


class HouseholdFilterIndex(FilterService):
    def __init__(
        self,
        store: InMemoryHouseholdStore,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._clock = clock

    def compute(
        self,
        query: str = "",
        category: CategoryFilter | None = None,
        quick: QuickFilter | None = None,
        today: date | None = None,
    ) -> list[int]:
        """Return the visible household ids in store order."""
        today = today or self._clock()
        visible: list[int] = []
        for household in self._store.all():
            if not matches_query(household, query):
                continue
            status = derive_status(household, today)
            if not matches_category(household, category, status):
                continue
            if not matches_quick(household, quick, status, today):
                continue
            visible.append(household.id)
        return visible

    def stats(self, today: date | None = None) -> ReviewStats:
        today = today or self._clock()
        counts = dict.fromkeys(ReviewStatus, 0)
        vip = high = due_this_month = 0
        households = self._store.all()
        for household in households:
            counts[derive_status(household, today)] += 1
            vip += household.priority == Priority.VIP
            high += household.priority == Priority.HIGH
            due_this_month += _due_this_month(household, today)
        return ReviewStats(
            total=len(households),
            scheduled=counts[ReviewStatus.SCHEDULED],
            completed=counts[ReviewStatus.COMPLETED],
            overdue=counts[ReviewStatus.OVERDUE],
            vip=vip,
            high_priority=high,
            due_this_month=due_this_month,
        )
