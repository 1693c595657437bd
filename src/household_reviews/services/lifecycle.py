"""Review lifecycle: status derivation and completion transitions."""

from collections.abc import Callable
from datetime import date

from dateutil.relativedelta import relativedelta  # type: ignore[import-untyped]

from household_reviews.domain.households import Household
from household_reviews.domain.value_objects import (
    AdvanceKind,
    AdvanceOption,
    ReviewStatus,
    ReviewType,
    month_name,
    parse_month,
)
from household_reviews.exceptions import InvalidAdvanceDateError, InvalidFieldError
from household_reviews.logging_config import get_logger
from household_reviews.repositories.memory import InMemoryHouseholdStore
from household_reviews.services.interfaces import ReviewLifecycleService

logger = get_logger(__name__)


def add_months(value: date, months: int = 1) -> date:
    """Shift a date by calendar months, clamping to the last valid day.

    >>> add_months(date(2024, 1, 31))
    datetime.date(2024, 2, 29)
    """
    return value + relativedelta(months=months)


def derive_status(household: Household, today: date) -> ReviewStatus:
    """Derive the review status from the stored dates.

    A completion counts for the current cycle when it was recorded today, on
    or after the current due date, or when no further due date has been
    scheduled since (closed cycle). Overdue means the due date has passed
    with no completion recorded since.
    """
    completed = household.last_completed_date
    due = household.next_review_date

    if completed is not None and completed == today:
        return ReviewStatus.COMPLETED
    if due is None:
        return ReviewStatus.COMPLETED if completed is not None else ReviewStatus.SCHEDULED
    if completed is not None and completed >= due:
        return ReviewStatus.COMPLETED
    if due < today:
        return ReviewStatus.OVERDUE
    return ReviewStatus.SCHEDULED


def default_advance(review_type: ReviewType) -> AdvanceOption:
    if review_type == ReviewType.PERIODIC:
        return AdvanceOption.next_month()
    return AdvanceOption.none()


def validate_advance(advance: AdvanceOption, today: date) -> None:
    """Raise InvalidAdvanceDateError unless a custom date is strictly after today."""
    if advance.kind == AdvanceKind.CUSTOM_DATE:
        assert advance.custom_date is not None
        if advance.custom_date <= today:
            raise InvalidAdvanceDateError(
                advance.custom_date.isoformat(), today.isoformat()
            )


def next_review_after(
    household: Household, advance: AdvanceOption, today: date
) -> date | None:
    validate_advance(advance, today)
    if advance.kind == AdvanceKind.NONE:
        return None
    if advance.kind == AdvanceKind.CUSTOM_DATE:
        return advance.custom_date
    base = household.next_review_date or today
    return add_months(base, 1)


def next_occurrence_of_month(month: int, day: int, today: date) -> date:
    """First date in ``month`` on or after today's month, keeping ``day`` where it fits."""
    year = today.year if month >= today.month else today.year + 1
    return date(year, month, 1) + relativedelta(day=day)


class ReviewLifecycleServiceImpl(ReviewLifecycleService):
    """Applies review completions and month assignments through the store."""

    def __init__(
        self,
        store: InMemoryHouseholdStore,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._clock = clock

    def today(self) -> date:
        return self._clock()

    def status_of(self, household_id: int, today: date | None = None) -> ReviewStatus:
        return derive_status(self._store.get(household_id), today or self.today())

    def complete(
        self,
        household_id: int,
        advance: AdvanceOption | None = None,
        today: date | None = None,
    ) -> Household:
        """Record a completed review and move the due date.

        Args:
            household_id: Household to complete.
            advance: How to schedule the next review. Defaults to next month
                for Periodic households and no next date for Required ones.
            today: Completion date, defaults to the service clock.

        Raises:
            HouseholdNotFoundError: If the household does not exist.
            InvalidAdvanceDateError: If a custom date is not after today.
        """
        today = today or self.today()
        household = self._store.get(household_id)
        advance = advance or default_advance(household.review_type)
        next_date = next_review_after(household, advance, today)

        updated = self._store.update(
            household_id,
            {"last_completed_date": today, "next_review_date": next_date},
        )
        logger.info(
            "review_completed",
            household_id=household_id,
            advance=advance.kind.value,
            next_review_date=next_date.isoformat() if next_date else None,
        )
        return updated

    def assign_month(
        self, household_id: int, month: int | str, today: date | None = None
    ) -> Household:
        """Assign a review month and move the due date into it.

        Raises:
            HouseholdNotFoundError: If the household does not exist.
            InvalidFieldError: If the month is not recognised.
        """
        today = today or self.today()
        month_number = self.resolve_month(month)
        household = self._store.get(household_id)
        day = (household.next_review_date or today).day
        next_date = next_occurrence_of_month(month_number, day, today)

        return self._store.update(
            household_id,
            {"assigned_month": month_name(month_number), "next_review_date": next_date},
        )

    @staticmethod
    def resolve_month(month: int | str) -> int:
        try:
            return parse_month(month)
        except ValueError as e:
            raise InvalidFieldError("assigned_month", str(e)) from None
