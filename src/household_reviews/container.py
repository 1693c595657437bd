"""Dependency injection container for the household review tracker.

One container owns one household store and hands the same store object to
every component, so there is no ambient global state.

Usage:
    from household_reviews.container import Container

    with Container() as container:
        container.open()
        visible = container.filter_index.compute(query="smith")
        container.selection.select_all(visible)
        container.bulk_actions.apply_bulk(BulkAction.MARK_COMPLETED)
"""

from collections.abc import Callable
from datetime import date
from functools import cached_property
from pathlib import Path

from household_reviews.config import Settings, get_settings
from household_reviews.domain.households import WorkspaceSettings
from household_reviews.domain.value_objects import Theme
from household_reviews.logging_config import get_logger
from household_reviews.repositories.memory import InMemoryHouseholdStore
from household_reviews.services.autosave import AutosaveScheduler
from household_reviews.services.filtering import HouseholdFilterIndex
from household_reviews.services.lifecycle import ReviewLifecycleServiceImpl
from household_reviews.services.persistence import JsonPersistenceManager
from household_reviews.services.selection import BulkActionService, SelectionSet

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    Components are built on first access and cached. Tests can pass custom
    settings and a fixed clock:

        container = Container(settings=Settings(data_file=tmp_path / "h.json"),
                              clock=lambda: date(2024, 3, 1))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        logger.debug(
            "container_created",
            data_file=str(self._settings.data_file),
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def store(self) -> InMemoryHouseholdStore:
        return InMemoryHouseholdStore(
            WorkspaceSettings(
                theme=Theme(self._settings.default_theme),
                backup_count=self._settings.default_backup_count,
            )
        )

    @cached_property
    def lifecycle(self) -> ReviewLifecycleServiceImpl:
        return ReviewLifecycleServiceImpl(self.store, clock=self._clock)

    @cached_property
    def filter_index(self) -> HouseholdFilterIndex:
        return HouseholdFilterIndex(self.store, clock=self._clock)

    @cached_property
    def selection(self) -> SelectionSet:
        return SelectionSet(self.store)

    @cached_property
    def bulk_actions(self) -> BulkActionService:
        return BulkActionService(self.store, self.lifecycle, self.selection)

    @cached_property
    def persistence(self) -> JsonPersistenceManager:
        return JsonPersistenceManager(
            self.store,
            backup_dir=self._settings.backup_dir,
            default_backup_count=self._settings.default_backup_count,
        )

    @cached_property
    def autosave(self) -> AutosaveScheduler:
        return AutosaveScheduler(
            self.store,
            save=self.persistence.save,
            quiet_period=self._settings.autosave_quiet_seconds,
        )

    def open(self, path: Path | str | None = None) -> Path:
        """Load a workspace file (the configured data file by default).

        The autosave scheduler is attached before the load so it sees every
        later change.
        """
        target = Path(path) if path is not None else self._settings.data_file
        _ = (self.selection, self.autosave)
        self.persistence.load(target)
        return target

    def close(self) -> None:
        """Flush a pending autosave and detach listeners."""
        if "autosave" in self.__dict__:
            self.autosave.flush()
            self.autosave.close()
        if "selection" in self.__dict__:
            self.selection.detach()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
