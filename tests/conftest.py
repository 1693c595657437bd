from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from household_reviews.domain.households import Household, Person
from household_reviews.domain.value_objects import Priority, ReviewType, Segment
from household_reviews.repositories.memory import InMemoryHouseholdStore
from household_reviews.services.filtering import HouseholdFilterIndex
from household_reviews.services.lifecycle import ReviewLifecycleServiceImpl
from household_reviews.services.persistence import JsonPersistenceManager
from household_reviews.services.selection import BulkActionService, SelectionSet

TODAY = date(2024, 3, 15)


class StepClock:
    """UTC clock that moves forward one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 15, 9, 30, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def store() -> InMemoryHouseholdStore:
    return InMemoryHouseholdStore()


@pytest.fixture
def make_household() -> Callable[..., Household]:
    def _make(
        name: str = "Smith Family",
        next_review_date: date | None = date(2024, 4, 1),
        **kwargs,
    ) -> Household:
        kwargs.setdefault("members", [Person(name="John Smith", role="Primary")])
        return Household(name=name, next_review_date=next_review_date, **kwargs)

    return _make


@pytest.fixture
def seeded_store(
    store: InMemoryHouseholdStore, make_household: Callable[..., Household]
) -> InMemoryHouseholdStore:
    """Four households: scheduled, overdue, VIP due this month, completed today."""
    store.add(make_household("Smith Family", date(2024, 4, 1), notes="Prefers email"))
    store.add(
        make_household(
            "Johnson Household",
            date(2024, 2, 10),
            segment=Segment.RED,
            priority=Priority.HIGH,
            members=[Person("Ann Johnson", "Primary"), Person("Bob Johnson", "Spouse")],
        )
    )
    store.add(
        make_household(
            "Garcia Trust",
            date(2024, 3, 28),
            segment=Segment.BLACK,
            priority=Priority.VIP,
            review_type=ReviewType.REQUIRED,
            auc=Decimal("2500000"),
        )
    )
    store.add(
        make_household(
            "Lee Family",
            date(2024, 4, 15),
            segment=Segment.YELLOW,
            last_completed_date=TODAY,
        )
    )
    store.mark_clean()
    return store


@pytest.fixture
def lifecycle(store: InMemoryHouseholdStore) -> ReviewLifecycleServiceImpl:
    return ReviewLifecycleServiceImpl(store, clock=lambda: TODAY)


@pytest.fixture
def filter_index(store: InMemoryHouseholdStore) -> HouseholdFilterIndex:
    return HouseholdFilterIndex(store, clock=lambda: TODAY)


@pytest.fixture
def selection(store: InMemoryHouseholdStore) -> SelectionSet:
    return SelectionSet(store)


@pytest.fixture
def bulk(
    store: InMemoryHouseholdStore,
    lifecycle: ReviewLifecycleServiceImpl,
    selection: SelectionSet,
) -> BulkActionService:
    return BulkActionService(store, lifecycle, selection)


@pytest.fixture
def utc_clock() -> StepClock:
    return StepClock()


@pytest.fixture
def workspace_file(tmp_path: Path) -> Path:
    return tmp_path / "households.json"


@pytest.fixture
def persistence(
    store: InMemoryHouseholdStore, utc_clock: StepClock
) -> JsonPersistenceManager:
    return JsonPersistenceManager(store, clock=utc_clock)
