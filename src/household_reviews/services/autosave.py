"""Debounced autosave.

Every store change restarts a fixed quiet period; the save runs once the
store has been quiet for that long, so a burst of edits produces one save.
The scheduler is cooperative: the host loop calls ``tick()``.
"""

import time
from collections.abc import Callable

from household_reviews.exceptions import HouseholdReviewError
from household_reviews.logging_config import get_logger
from household_reviews.repositories.interfaces import StoreChange
from household_reviews.repositories.memory import InMemoryHouseholdStore

logger = get_logger(__name__)


def is_autosave_due(
    last_change_at: float | None, now: float, quiet_period: float
) -> bool:
    """Whether a pending change has been quiet for at least ``quiet_period`` seconds."""
    if last_change_at is None:
        return False
    return now - last_change_at >= quiet_period


class AutosaveScheduler:
    def __init__(
        self,
        store: InMemoryHouseholdStore,
        save: Callable[[], object],
        quiet_period: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._save = save
        self._quiet_period = quiet_period
        self._clock = clock
        self._last_change_at: float | None = None
        self.saves = 0
        self.failures = 0
        store.subscribe(self._on_store_change)

    @property
    def pending(self) -> bool:
        return self._last_change_at is not None

    @property
    def quiet_period(self) -> float:
        return self._quiet_period

    def notify(self, now: float | None = None) -> None:
        """Record a change, restarting the quiet period."""
        self._last_change_at = self._clock() if now is None else now

    def seconds_remaining(self, now: float | None = None) -> float | None:
        if self._last_change_at is None:
            return None
        now = self._clock() if now is None else now
        return max(0.0, self._quiet_period - (now - self._last_change_at))

    def tick(self, now: float | None = None) -> bool:
        """Run the save if the quiet period has elapsed. Returns True if it saved."""
        now = self._clock() if now is None else now
        if not is_autosave_due(self._last_change_at, now, self._quiet_period):
            return False
        return self._run()

    def flush(self) -> bool:
        """Save immediately if a change is pending."""
        if not self.pending:
            return False
        return self._run()

    def cancel(self) -> None:
        """Drop the pending save. A save already running is not interrupted."""
        self._last_change_at = None

    def close(self) -> None:
        self.cancel()
        self._store.unsubscribe(self._on_store_change)

    def _on_store_change(self, change: StoreChange) -> None:
        if change.reloaded:
            # A freshly loaded workspace is already on disk
            self.cancel()
            return
        self.notify()

    def _run(self) -> bool:
        self._last_change_at = None
        if not self._store.is_dirty:
            return False
        try:
            self._save()
        except (HouseholdReviewError, OSError) as e:
            self.failures += 1
            logger.warning("autosave_failed", error=str(e))
            return False
        self.saves += 1
        logger.debug("autosave_completed", saves=self.saves)
        return True
