from unittest.mock import MagicMock

import pytest

from household_reviews.exceptions import StorageIOError
from household_reviews.services.autosave import AutosaveScheduler, is_autosave_due


class FakeMonotonic:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def save(store) -> MagicMock:
    return MagicMock(side_effect=lambda: store.mark_clean())


@pytest.fixture
def scheduler(store, save, monotonic) -> AutosaveScheduler:
    return AutosaveScheduler(store, save, quiet_period=1.0, clock=monotonic)


class TestIsAutosaveDue:
    def test_nothing_pending(self):
        assert is_autosave_due(None, 50.0, 1.0) is False

    def test_quiet_period_boundary(self):
        assert is_autosave_due(10.0, 10.999, 1.0) is False
        assert is_autosave_due(10.0, 11.0, 1.0) is True


class TestAutosaveScheduler:
    def test_saves_once_after_quiet_period(
        self, store, make_household, scheduler, save, monotonic
    ):
        store.add(make_household())
        assert scheduler.pending is True

        monotonic.now += 0.5
        assert scheduler.tick() is False
        monotonic.now += 0.5
        assert scheduler.tick() is True

        save.assert_called_once()
        assert scheduler.pending is False
        assert scheduler.saves == 1

    def test_burst_of_changes_restarts_quiet_period(
        self, store, make_household, scheduler, save, monotonic
    ):
        for _ in range(5):
            store.add(make_household())
            monotonic.now += 0.6
            scheduler.tick()

        save.assert_not_called()
        assert scheduler.seconds_remaining() == pytest.approx(0.4)

        monotonic.now += 0.5
        scheduler.tick()
        save.assert_called_once()

    def test_flush_saves_immediately(self, store, make_household, scheduler, save):
        store.add(make_household())

        assert scheduler.flush() is True
        save.assert_called_once()

    def test_flush_without_pending_change_does_nothing(self, scheduler, save):
        assert scheduler.flush() is False
        save.assert_not_called()

    def test_cancel_drops_pending_save(
        self, store, make_household, scheduler, save, monotonic
    ):
        store.add(make_household())
        scheduler.cancel()
        monotonic.now += 5

        assert scheduler.tick() is False
        assert scheduler.seconds_remaining() is None
        save.assert_not_called()

    def test_reload_cancels_pending_save(
        self, store, make_household, scheduler, save, monotonic
    ):
        store.add(make_household())

        store.replace_all([])
        monotonic.now += 5

        assert scheduler.tick() is False
        save.assert_not_called()

    def test_skips_save_when_store_already_clean(
        self, store, make_household, scheduler, save, monotonic
    ):
        store.add(make_household())
        store.mark_clean()
        monotonic.now += 5

        assert scheduler.tick() is False
        save.assert_not_called()

    def test_failed_save_is_counted_and_retried_on_next_change(
        self, store, make_household, scheduler, save, monotonic
    ):
        save.side_effect = StorageIOError("write", "/tmp/h.json", "disk full")
        store.add(make_household())
        monotonic.now += 1

        assert scheduler.tick() is False
        assert scheduler.failures == 1
        assert scheduler.pending is False
        assert store.is_dirty is True

        save.side_effect = None
        store.add(make_household())
        monotonic.now += 1
        assert scheduler.tick() is True

    def test_close_stops_listening(
        self, store, make_household, scheduler, save, monotonic
    ):
        scheduler.close()
        store.add(make_household())

        assert scheduler.pending is False
        assert scheduler.quiet_period == 1.0
