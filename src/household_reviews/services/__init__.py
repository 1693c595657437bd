from household_reviews.services.autosave import AutosaveScheduler, is_autosave_due
from household_reviews.services.export import EXPORT_COLUMNS, export_households_csv
from household_reviews.services.filtering import (
    HouseholdFilterIndex,
    QuickFilter,
    ReviewStats,
    parse_category,
)
from household_reviews.services.interfaces import (
    CategoryFilter,
    FilterService,
    PersistenceService,
    ReviewLifecycleService,
)
from household_reviews.services.lifecycle import (
    ReviewLifecycleServiceImpl,
    add_months,
    derive_status,
)
from household_reviews.services.persistence import (
    BackupInfo,
    FileInfo,
    JsonPersistenceManager,
)
from household_reviews.services.selection import (
    BulkAction,
    BulkActionService,
    BulkResult,
    SelectionSet,
)

__all__ = [
    "AutosaveScheduler",
    "BackupInfo",
    "BulkAction",
    "BulkActionService",
    "BulkResult",
    "CategoryFilter",
    "EXPORT_COLUMNS",
    "FileInfo",
    "FilterService",
    "HouseholdFilterIndex",
    "JsonPersistenceManager",
    "PersistenceService",
    "QuickFilter",
    "ReviewLifecycleService",
    "ReviewLifecycleServiceImpl",
    "ReviewStats",
    "SelectionSet",
    "add_months",
    "derive_status",
    "export_households_csv",
    "is_autosave_due",
    "parse_category",
]
