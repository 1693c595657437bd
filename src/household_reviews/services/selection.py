"""Selection set and bulk actions over selected households."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from household_reviews.domain.value_objects import AdvanceOption
from household_reviews.exceptions import NotFoundError, ValidationError
from household_reviews.logging_config import LogContext, get_logger
from household_reviews.repositories.interfaces import StoreChange
from household_reviews.repositories.memory import InMemoryHouseholdStore
from household_reviews.services.lifecycle import (
    ReviewLifecycleServiceImpl,
    validate_advance,
)

logger = get_logger(__name__)


class BulkAction(str, Enum):
    MARK_COMPLETED = "mark_completed"
    ASSIGN_MONTH = "assign_month"
    DELETE = "delete"


class SelectionSet:
    """Ids of selected households.

    Always a subset of the store's ids: the set listens to the store and
    drops ids as soon as their households are removed. Filter changes do not
    touch the selection.
    """

    def __init__(self, store: InMemoryHouseholdStore) -> None:
        self._store = store
        self._ids: set[int] = set()
        store.subscribe(self._on_store_change)

    def toggle(self, household_id: int) -> bool:
        """Flip selection for one id. Returns whether it is now selected."""
        if household_id in self._ids:
            self._ids.discard(household_id)
            return False
        if household_id not in self._store:
            return False
        self._ids.add(household_id)
        return True

    def select_all(self, visible_ids: Iterable[int]) -> None:
        """Replace the selection with exactly the currently visible ids."""
        self._ids = {hid for hid in visible_ids if hid in self._store}

    def clear(self) -> None:
        self._ids.clear()

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(self._ids)

    def __contains__(self, household_id: object) -> bool:
        return household_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ids))

    def detach(self) -> None:
        self._store.unsubscribe(self._on_store_change)

    def _on_store_change(self, change: StoreChange) -> None:
        if change.removed:
            self._ids -= change.removed


@dataclass
class BulkResult:
    action: BulkAction
    applied: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.applied)


class BulkActionService:
    """Applies one action to every selected household.

    Per-item NotFoundError is tolerated so a household deleted behind the
    selection's back does not block the rest of the batch. The whole batch
    produces a single dirty transition and change notification.
    """

    def __init__(
        self,
        store: InMemoryHouseholdStore,
        lifecycle: ReviewLifecycleServiceImpl,
        selection: SelectionSet,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle
        self._selection = selection

    def apply_bulk(
        self,
        action: BulkAction,
        advance: AdvanceOption | None = None,
        month: int | str | None = None,
        today: date | None = None,
    ) -> BulkResult:
        """Apply ``action`` to the current selection and clear it.

        Args:
            action: The bulk action.
            advance: Advance option for MARK_COMPLETED. None picks the
                per-household default.
            month: Target month for ASSIGN_MONTH.
            today: Reference date, defaults to the lifecycle clock.

        Raises:
            ValidationError: If the shared arguments are invalid. Raised before
                any household is touched.
        """
        action = BulkAction(action)
        today = today or self._lifecycle.today()
        self._check_arguments(action, advance, month, today)

        result = BulkResult(action=action)
        selected = list(self._selection)

        with LogContext(bulk_action=action.value, selected=len(selected)):
            with self._store.batch():
                if action == BulkAction.DELETE:
                    removed = self._store.remove(selected)
                    result.applied = sorted(removed)
                    result.skipped = sorted(set(selected) - removed)
                else:
                    for household_id in selected:
                        try:
                            if action == BulkAction.MARK_COMPLETED:
                                self._lifecycle.complete(household_id, advance, today)
                            else:
                                assert month is not None
                                self._lifecycle.assign_month(household_id, month, today)
                        except NotFoundError:
                            logger.debug("bulk_item_skipped", household_id=household_id)
                            result.skipped.append(household_id)
                            continue
                        result.applied.append(household_id)

            self._selection.clear()
            logger.info(
                "bulk_action_applied",
                applied=len(result.applied),
                skipped=len(result.skipped),
            )
        return result

    def _check_arguments(
        self,
        action: BulkAction,
        advance: AdvanceOption | None,
        month: int | str | None,
        today: date,
    ) -> None:
        if action == BulkAction.MARK_COMPLETED and advance is not None:
            validate_advance(advance, today)
        if action == BulkAction.ASSIGN_MONTH:
            if month is None:
                raise ValidationError("A month is required to assign reviews")
            self._lifecycle.resolve_month(month)
