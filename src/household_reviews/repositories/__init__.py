from household_reviews.repositories.interfaces import (
    ChangeListener,
    HouseholdRepository,
    StoreChange,
)
from household_reviews.repositories.memory import (
    InMemoryHouseholdStore,
    validate_household,
)

__all__ = [
    "ChangeListener",
    "HouseholdRepository",
    "InMemoryHouseholdStore",
    "StoreChange",
    "validate_household",
]
