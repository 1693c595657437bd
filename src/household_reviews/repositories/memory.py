"""In-memory household store.

The store is the single owner of household records and workspace settings.
Every mutation marks it dirty and raises one change notification; mutations
wrapped in ``batch()`` are coalesced into a single notification.
"""

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from household_reviews.domain.households import Household, Person, WorkspaceSettings
from household_reviews.domain.value_objects import (
    Priority,
    ReviewType,
    Segment,
    Theme,
    month_name,
    parse_month,
)
from household_reviews.exceptions import (
    HouseholdNotFoundError,
    InvalidFieldError,
    ValidationError,
)
from household_reviews.logging_config import get_logger
from household_reviews.repositories.interfaces import (
    ChangeListener,
    HouseholdRepository,
    StoreChange,
)

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "members",
        "segment",
        "priority",
        "review_type",
        "next_review_date",
        "last_completed_date",
        "notes",
        "auc",
        "assigned_month",
    }
)

_ENUM_FIELDS = {
    "segment": Segment,
    "priority": Priority,
    "review_type": ReviewType,
}


def _coerce_field(name: str, value: Any) -> Any:
    if name in _ENUM_FIELDS:
        enum_type = _ENUM_FIELDS[name]
        try:
            return enum_type(value)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            raise InvalidFieldError(name, f"{value!r} is not one of {allowed}") from None
    if name in ("next_review_date", "last_completed_date"):
        if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
            return value
        raise InvalidFieldError(name, "expected a calendar date")
    if name == "members":
        members = list(value or [])
        if not all(isinstance(member, Person) for member in members):
            raise InvalidFieldError(name, "members must be Person records")
        return members
    if name == "auc":
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise InvalidFieldError(name, f"{value!r} is not a number") from None
    if name == "assigned_month" and value is not None:
        try:
            return month_name(parse_month(value))
        except ValueError as e:
            raise InvalidFieldError(name, str(e)) from None
    if name in ("name", "notes"):
        return "" if value is None else str(value)
    return value


_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})


def _coerce_setting(name: str, value: Any) -> Any:
    if name == "theme":
        try:
            return Theme(value)
        except ValueError:
            raise InvalidFieldError(name, "must be 'light' or 'dark'") from None
    if name == "backup_count":
        if isinstance(value, bool):
            raise InvalidFieldError(name, "expected a whole number")
        try:
            count = int(value)
        except (TypeError, ValueError):
            raise InvalidFieldError(name, f"{value!r} is not a whole number") from None
        if count < 0:
            raise InvalidFieldError(name, "must not be negative")
        return count
    if name == "auto_backup":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
        raise InvalidFieldError(name, f"{value!r} is not true or false")
    if name == "last_file_path":
        return None if value is None else str(value)
    return value


def validate_household(household: Household) -> None:
    """Check the record-level invariants.

    Raises:
        ValidationError: If the name or member list is empty, a member has no
            name, or an open review cycle has no due date.
    """
    if not household.name.strip():
        raise InvalidFieldError("name", "must not be empty")
    if not household.members:
        raise InvalidFieldError("members", "at least one member is required")
    for position, member in enumerate(household.members, start=1):
        if not member.name.strip():
            raise InvalidFieldError("members", f"member {position} has no name")
    if household.next_review_date is None and household.last_completed_date is None:
        raise InvalidFieldError(
            "next_review_date", "required until the review has been completed"
        )
    if household.auc < 0:
        raise InvalidFieldError("auc", "must not be negative")


class InMemoryHouseholdStore(HouseholdRepository):
    """Canonical collection of households, kept in insertion order."""

    def __init__(self, settings: WorkspaceSettings | None = None) -> None:
        self._records: dict[int, Household] = {}
        self._settings = settings or WorkspaceSettings()
        self._next_id = 1
        self._revision = 0
        self._dirty = False
        self._listeners: list[ChangeListener] = []
        self._batch_depth = 0
        self._pending: dict[str, set[int]] = {"added": set(), "updated": set(), "removed": set()}
        self._pending_settings = False

    # -- reads ---------------------------------------------------------------

    def get(self, household_id: int) -> Household:
        household = self._records.get(household_id)
        if household is None:
            raise HouseholdNotFoundError(household_id)
        return household

    def find(self, household_id: int) -> Household | None:
        return self._records.get(household_id)

    def all(self) -> list[Household]:
        return list(self._records.values())

    def ids(self) -> list[int]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, household_id: object) -> bool:
        return household_id in self._records

    def __iter__(self) -> Iterator[Household]:
        return iter(self.all())

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def settings(self) -> WorkspaceSettings:
        return self._settings

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def revision(self) -> int:
        """Counter bumped on every notified change."""
        return self._revision

    # -- mutations -----------------------------------------------------------

    def add(self, household: Household) -> int:
        """Store a copy of ``household`` under a new id and return the id."""
        household = replace(household)
        for name in sorted(UPDATABLE_FIELDS):
            setattr(household, name, _coerce_field(name, getattr(household, name)))
        validate_household(household)

        household.id = self._next_id
        self._next_id += 1
        self._records[household.id] = household
        logger.debug("household_added", household_id=household.id, name=household.name)
        self._changed("added", {household.id})
        return household.id

    def update(self, household_id: int, patch: Mapping[str, Any]) -> Household:
        household = self.get(household_id)
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}",
                context={"fields": sorted(unknown)},
            )
        changes = {name: _coerce_field(name, value) for name, value in patch.items()}
        candidate = replace(household, **changes)
        validate_household(candidate)

        for name, value in changes.items():
            setattr(household, name, value)
        household.touch()
        self._changed("updated", {household_id})
        return household

    def remove(self, household_ids: Iterable[int]) -> set[int]:
        removed = {hid for hid in set(household_ids) if hid in self._records}
        for hid in removed:
            del self._records[hid]
        if removed:
            logger.debug("households_removed", household_ids=sorted(removed))
            self._changed("removed", removed)
        return removed

    def update_settings(self, **changes: Any) -> WorkspaceSettings:
        valid = {f.name for f in fields(WorkspaceSettings)}
        unknown = set(changes) - valid
        if unknown:
            raise ValidationError(
                f"Unknown setting(s): {', '.join(sorted(unknown))}",
                context={"settings": sorted(unknown)},
            )
        coerced = {name: _coerce_setting(name, value) for name, value in changes.items()}

        for name, value in coerced.items():
            setattr(self._settings, name, value)
        self._pending_settings = True
        self._flush_pending()
        return self._settings

    def replace_all(
        self,
        households: Iterable[Household],
        settings: WorkspaceSettings | None = None,
    ) -> None:
        """Swap in a freshly loaded collection.

        The id counter is recomputed from the data rather than trusted from
        any stored value. The store is clean afterwards.

        Raises:
            ValidationError: If two records share an id.
        """
        records: dict[int, Household] = {}
        for household in households:
            if household.id in records:
                raise ValidationError(
                    f"Duplicate household id: {household.id}",
                    context={"household_id": household.id},
                )
            records[household.id] = household

        dropped = set(self._records) - set(records)
        self._records = records
        if settings is not None:
            self._settings = settings
        self._next_id = max(records, default=0) + 1
        self._revision += 1
        self._dirty = False
        self._notify(StoreChange(removed=frozenset(dropped), reloaded=True))

    def mark_clean(self, revision: int | None = None) -> None:
        """Clear the dirty flag, unless the store changed after ``revision``."""
        if revision is None or revision == self._revision:
            self._dirty = False

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Coalesce all mutations in the block into one dirty mark and notification."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush_pending()

    # -- change channel ------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self, kind: str, household_ids: set[int]) -> None:
        self._pending[kind].update(household_ids)
        if self._batch_depth == 0:
            self._flush_pending()

    def _flush_pending(self) -> None:
        if self._batch_depth:
            return
        removed = self._pending["removed"]
        change = StoreChange(
            added=frozenset(self._pending["added"] - removed),
            updated=frozenset(self._pending["updated"] - removed),
            removed=frozenset(removed),
            settings_changed=self._pending_settings,
        )
        self._pending = {"added": set(), "updated": set(), "removed": set()}
        self._pending_settings = False
        if change.is_empty:
            return
        self._revision += 1
        self._dirty = True
        self._notify(change)

    def _notify(self, change: StoreChange) -> None:
        for listener in list(self._listeners):
            listener(change)
