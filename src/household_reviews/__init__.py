from household_reviews.domain.households import Household, Person, WorkspaceSettings
from household_reviews.domain.value_objects import (
    AdvanceOption,
    Priority,
    ReviewStatus,
    ReviewType,
    Segment,
)
from household_reviews.repositories.memory import InMemoryHouseholdStore

__all__ = [
    "AdvanceOption",
    "Household",
    "InMemoryHouseholdStore",
    "Person",
    "Priority",
    "ReviewStatus",
    "ReviewType",
    "Segment",
    "WorkspaceSettings",
]

__version__ = "0.1.0"
