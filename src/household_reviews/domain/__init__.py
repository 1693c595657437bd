from household_reviews.domain.households import (
    DOCUMENT_VERSION,
    Household,
    Person,
    WorkspaceSettings,
)
from household_reviews.domain.value_objects import (
    MONTHS,
    AdvanceKind,
    AdvanceOption,
    Priority,
    ReviewStatus,
    ReviewType,
    Segment,
    Theme,
)

__all__ = [
    "DOCUMENT_VERSION",
    "MONTHS",
    "AdvanceKind",
    "AdvanceOption",
    "Household",
    "Person",
    "Priority",
    "ReviewStatus",
    "ReviewType",
    "Segment",
    "Theme",
    "WorkspaceSettings",
]
