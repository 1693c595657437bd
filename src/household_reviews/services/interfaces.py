from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from household_reviews.domain.households import Household
from household_reviews.domain.value_objects import (
    AdvanceOption,
    ReviewStatus,
    ReviewType,
    Segment,
)

if TYPE_CHECKING:
    from household_reviews.services.filtering import QuickFilter, ReviewStats
    from household_reviews.services.persistence import BackupInfo, FileInfo

CategoryFilter = Segment | ReviewType | ReviewStatus


class ReviewLifecycleService(ABC):
    @abstractmethod
    def status_of(self, household_id: int, today: date | None = None) -> ReviewStatus:
        pass

    @abstractmethod
    def complete(
        self,
        household_id: int,
        advance: AdvanceOption | None = None,
        today: date | None = None,
    ) -> Household:
        pass

    @abstractmethod
    def assign_month(
        self, household_id: int, month: int | str, today: date | None = None
    ) -> Household:
        pass


class FilterService(ABC):
    @abstractmethod
    def compute(
        self,
        query: str = "",
        category: CategoryFilter | None = None,
        quick: QuickFilter | None = None,
        today: date | None = None,
    ) -> list[int]:
        pass

    @abstractmethod
    def stats(self, today: date | None = None) -> ReviewStats:
        pass


class PersistenceService(ABC):
    @abstractmethod
    def save(self, path: Path | str | None = None) -> Path:
        pass

    @abstractmethod
    def load(self, path: Path | str) -> None:
        pass

    @abstractmethod
    def backup(self) -> Path | None:
        pass

    @abstractmethod
    def list_backups(self) -> list[BackupInfo]:
        pass

    @abstractmethod
    def restore_backup(self, backup_path: Path | str) -> None:
        pass

    @abstractmethod
    def delete_backup(self, backup_path: Path | str) -> None:
        pass

    @abstractmethod
    def file_info(self, path: Path | str | None = None) -> FileInfo:
        pass

