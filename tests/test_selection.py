from datetime import date

import pytest

from household_reviews.domain.value_objects import AdvanceOption, ReviewStatus
from household_reviews.exceptions import (
    InvalidAdvanceDateError,
    InvalidFieldError,
    ValidationError,
)
from household_reviews.repositories.interfaces import StoreChange
from household_reviews.services.selection import BulkAction, BulkResult

TODAY = date(2024, 3, 15)


@pytest.fixture
def changes(seeded_store) -> list[StoreChange]:
    received: list[StoreChange] = []
    seeded_store.subscribe(received.append)
    return received


class TestSelectionSet:
    def test_toggle(self, seeded_store, selection):
        assert selection.toggle(2) is True
        assert 2 in selection
        assert selection.toggle(2) is False
        assert 2 not in selection

    def test_toggle_unknown_id_is_ignored(self, seeded_store, selection):
        assert selection.toggle(99) is False
        assert len(selection) == 0

    def test_select_all_replaces_selection_with_visible(
        self, seeded_store, selection, filter_index
    ):
        selection.toggle(1)

        selection.select_all(filter_index.compute(category=ReviewStatus.SCHEDULED))

        assert selection.ids == frozenset({1, 3})
        assert list(selection) == [1, 3]

    def test_select_all_drops_unknown_ids(self, seeded_store, selection):
        selection.select_all([1, 42])

        assert selection.ids == frozenset({1})

    def test_selection_survives_filter_changes(
        self, seeded_store, selection, filter_index
    ):
        selection.select_all(filter_index.compute(query="family"))

        visible = filter_index.compute(query="garcia")

        assert visible == [3]
        assert selection.ids == frozenset({1, 4})

    def test_removed_households_are_pruned(self, seeded_store, selection):
        selection.select_all([1, 2, 3])

        seeded_store.remove([2])

        assert selection.ids == frozenset({1, 3})

    def test_reload_prunes_missing_ids(self, seeded_store, selection, make_household):
        selection.select_all([1, 2])

        seeded_store.replace_all([make_household("Only", id=2)])

        assert selection.ids == frozenset({2})

    def test_clear(self, seeded_store, selection):
        selection.select_all([1, 2])
        selection.clear()

        assert len(selection) == 0


class TestBulkMarkCompleted:
    def test_completes_every_selected_household(self, seeded_store, selection, bulk):
        selection.select_all([1, 2])

        result = bulk.apply_bulk(BulkAction.MARK_COMPLETED)

        assert result == BulkResult(BulkAction.MARK_COMPLETED, applied=[1, 2])
        assert result.count == 2
        assert seeded_store.get(1).last_completed_date == TODAY
        assert seeded_store.get(1).next_review_date == date(2024, 5, 1)
        assert seeded_store.get(2).next_review_date == date(2024, 3, 10)
        assert len(selection) == 0

    def test_single_notification_and_dirty_transition(
        self, seeded_store, selection, bulk, changes
    ):
        selection.select_all([1, 2, 3, 4])
        revision = seeded_store.revision

        bulk.apply_bulk(BulkAction.MARK_COMPLETED)

        assert len(changes) == 1
        assert changes[0].updated == frozenset({1, 2, 3, 4})
        assert seeded_store.revision == revision + 1
        assert seeded_store.is_dirty is True

    def test_invalid_custom_date_touches_nothing(self, seeded_store, selection, bulk):
        selection.select_all([1, 2])

        with pytest.raises(InvalidAdvanceDateError):
            bulk.apply_bulk(
                BulkAction.MARK_COMPLETED, advance=AdvanceOption.custom(TODAY)
            )

        assert seeded_store.get(1).last_completed_date is None
        assert seeded_store.is_dirty is False
        assert selection.ids == frozenset({1, 2})

    def test_custom_date_applies_to_all(self, seeded_store, selection, bulk):
        selection.select_all([1, 3])

        bulk.apply_bulk(
            BulkAction.MARK_COMPLETED, advance=AdvanceOption.custom(date(2024, 12, 1))
        )

        assert seeded_store.get(1).next_review_date == date(2024, 12, 1)
        assert seeded_store.get(3).next_review_date == date(2024, 12, 1)

    def test_stale_id_is_skipped(self, seeded_store, selection, bulk):
        selection.select_all([1, 2])
        selection.detach()
        seeded_store.remove([2])

        result = bulk.apply_bulk(BulkAction.MARK_COMPLETED)

        assert result.applied == [1]
        assert result.skipped == [2]


class TestBulkAssignMonth:
    def test_assigns_month(self, seeded_store, selection, bulk):
        selection.select_all([1, 3])

        result = bulk.apply_bulk(BulkAction.ASSIGN_MONTH, month="July")

        assert result.count == 2
        assert seeded_store.get(1).assigned_month == "July"
        assert seeded_store.get(1).next_review_date == date(2024, 7, 1)
        assert seeded_store.get(3).next_review_date == date(2024, 7, 28)

    def test_month_is_required(self, seeded_store, selection, bulk):
        selection.select_all([1])

        with pytest.raises(ValidationError, match="month is required"):
            bulk.apply_bulk(BulkAction.ASSIGN_MONTH)

    def test_invalid_month_touches_nothing(self, seeded_store, selection, bulk):
        selection.select_all([1])

        with pytest.raises(InvalidFieldError):
            bulk.apply_bulk(BulkAction.ASSIGN_MONTH, month="Smarch")

        assert seeded_store.get(1).assigned_month is None
        assert seeded_store.is_dirty is False


class TestBulkDelete:
    def test_deletes_selected(self, seeded_store, selection, bulk, changes):
        selection.select_all([2, 3])

        result = bulk.apply_bulk(BulkAction.DELETE)

        assert result.applied == [2, 3]
        assert seeded_store.ids() == [1, 4]
        assert len(changes) == 1
        assert len(selection) == 0

    def test_stale_id_is_skipped(self, seeded_store, selection, bulk):
        selection.select_all([1, 2])
        selection.detach()
        seeded_store.remove([2])

        result = bulk.apply_bulk(BulkAction.DELETE)

        assert result.applied == [1]
        assert result.skipped == [2]
        assert seeded_store.ids() == [3, 4]

    def test_accepts_action_value(self, seeded_store, selection, bulk):
        selection.select_all([4])

        result = bulk.apply_bulk("delete")

        assert result.action == BulkAction.DELETE
        assert result.count == 1

    def test_empty_selection_changes_nothing(self, seeded_store, bulk, changes):
        result = bulk.apply_bulk(BulkAction.DELETE)

        assert result.count == 0
        assert changes == []
