from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any

from household_reviews.domain.households import Household, WorkspaceSettings


@dataclass(frozen=True)
class StoreChange:
    """One change notification: the ids touched by a mutation or a batch."""

    added: frozenset[int] = field(default_factory=frozenset)
    updated: frozenset[int] = field(default_factory=frozenset)
    removed: frozenset[int] = field(default_factory=frozenset)
    settings_changed: bool = False
    reloaded: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.added
            or self.updated
            or self.removed
            or self.settings_changed
            or self.reloaded
        )


ChangeListener = Callable[[StoreChange], None]


class HouseholdRepository(ABC):
    @abstractmethod
    def add(self, household: Household) -> int:
        pass

    @abstractmethod
    def get(self, household_id: int) -> Household:
        pass

    @abstractmethod
    def find(self, household_id: int) -> Household | None:
        pass

    @abstractmethod
    def all(self) -> list[Household]:
        pass

    @abstractmethod
    def update(self, household_id: int, patch: Mapping[str, Any]) -> Household:
        pass

    @abstractmethod
    def remove(self, household_ids: Iterable[int]) -> set[int]:
        pass

    @abstractmethod
    def batch(self) -> AbstractContextManager[None]:
        pass

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> None:
        pass

    @abstractmethod
    def unsubscribe(self, listener: ChangeListener) -> None:
        pass

    @property
    @abstractmethod
    def settings(self) -> WorkspaceSettings:
        pass

    @property
    @abstractmethod
    def is_dirty(self) -> bool:
        pass
