"""Pydantic v2 schemas for the persisted workspace document.

Documents are written with camelCase keys. Older documents are upgraded on
load: missing fields take their defaults and the snake_case keys written by
version 1.0.0 are accepted as aliases.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)

from household_reviews.domain.households import (
    DOCUMENT_VERSION,
    Household,
    Person,
    WorkspaceSettings,
)
from household_reviews.domain.value_objects import Priority, ReviewType, Segment, Theme

LEGACY_VERSION = "1.0.0"


def _aliased(camel: str, *legacy: str, **kwargs: Any) -> Any:
    return Field(
        validation_alias=AliasChoices(camel, *legacy),
        serialization_alias=camel,
        **kwargs,
    )


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
OptionalDatetime = Annotated[datetime | None, BeforeValidator(_blank_to_none)]
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]


class PersonDocument(BaseModel):
    """Schema for a household member."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    role: str = ""
    date_of_birth: OptionalDate = _aliased("dateOfBirth", "dob", "date_of_birth", default=None)

    @classmethod
    def from_domain(cls, person: Person) -> "PersonDocument":
        return cls(name=person.name, role=person.role, dateOfBirth=person.date_of_birth)

    def to_domain(self) -> Person:
        return Person(name=self.name, role=self.role, date_of_birth=self.date_of_birth)


class HouseholdDocument(BaseModel):
    """Schema for one household record."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., ge=1)
    name: str = _aliased("name", "household_name", min_length=1)
    segment: Segment = Segment.GREEN
    priority: Priority = _aliased("priority", "priority_flag", default=Priority.STANDARD)
    review_type: ReviewType = _aliased("reviewType", "review_type", default=ReviewType.PERIODIC)
    members: list[PersonDocument] = _aliased("members", "persons", min_length=1)
    next_review_date: OptionalDate = _aliased(
        "nextReviewDate", "next_review_due", "next_review_date", default=None
    )
    last_completed_date: OptionalDate = _aliased(
        "lastCompletedDate", "last_review_date", "last_completed_date", default=None
    )
    notes: str = ""
    auc: Decimal = Field(default=Decimal("0"), ge=0)
    assigned_month: OptionalText = _aliased("assignedMonth", "assigned_month", default=None)
    created_at: OptionalDatetime = _aliased("createdAt", "created", "created_at", default=None)
    updated_at: OptionalDatetime = _aliased("updatedAt", "updated", "updated_at", default=None)

    @classmethod
    def from_domain(cls, household: Household) -> "HouseholdDocument":
        return cls(
            id=household.id,
            name=household.name,
            segment=household.segment,
            priority=household.priority,
            reviewType=household.review_type,
            members=[PersonDocument.from_domain(m) for m in household.members],
            nextReviewDate=household.next_review_date,
            lastCompletedDate=household.last_completed_date,
            notes=household.notes,
            auc=household.auc,
            assignedMonth=household.assigned_month,
            createdAt=household.created_at,
            updatedAt=household.updated_at,
        )

    def to_domain(self) -> Household:
        household = Household(
            id=self.id,
            name=self.name,
            members=[member.to_domain() for member in self.members],
            next_review_date=self.next_review_date,
            segment=self.segment,
            priority=self.priority,
            review_type=self.review_type,
            last_completed_date=self.last_completed_date,
            notes=self.notes,
            auc=self.auc,
            assigned_month=self.assigned_month,
        )
        if self.created_at is not None:
            household.created_at = self.created_at
        household.updated_at = self.updated_at or household.created_at
        return household


class SettingsDocument(BaseModel):
    """Schema for the workspace settings block."""

    model_config = ConfigDict(extra="ignore")

    last_file_path: str | None = _aliased("lastFilePath", "last_file_path", default=None)
    theme: Theme = Theme.LIGHT
    auto_backup: bool = _aliased("autoBackup", "auto_backup", default=True)
    backup_count: int = _aliased("backupCount", "backup_count", default=10, ge=0)

    @classmethod
    def from_domain(cls, settings: WorkspaceSettings) -> "SettingsDocument":
        return cls(
            lastFilePath=settings.last_file_path,
            theme=settings.theme,
            autoBackup=settings.auto_backup,
            backupCount=settings.backup_count,
        )

    def to_domain(self) -> WorkspaceSettings:
        return WorkspaceSettings(
            last_file_path=self.last_file_path,
            theme=self.theme,
            auto_backup=self.auto_backup,
            backup_count=self.backup_count,
        )


class WorkspaceDocument(BaseModel):
    """Top-level persisted document: version tag, settings and households."""

    model_config = ConfigDict(extra="ignore")

    version: str = LEGACY_VERSION
    settings: SettingsDocument = Field(default_factory=SettingsDocument)
    households: list[HouseholdDocument] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        major = _major(v)
        if major is None:
            raise ValueError(f"unrecognised version {v!r}")
        if major > _major(DOCUMENT_VERSION):  # type: ignore[operator]
            raise ValueError(
                f"version {v} is newer than the supported {DOCUMENT_VERSION}"
            )
        return v

    @classmethod
    def from_domain(
        cls, households: list[Household], settings: WorkspaceSettings
    ) -> "WorkspaceDocument":
        return cls(
            version=DOCUMENT_VERSION,
            settings=SettingsDocument.from_domain(settings),
            households=[HouseholdDocument.from_domain(h) for h in households],
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def _major(version: str) -> int | None:
    head = version.strip().split(".", 1)[0]
    return int(head) if head.isdigit() else None


__all__ = [
    "HouseholdDocument",
    "LEGACY_VERSION",
    "PersonDocument",
    "SettingsDocument",
    "WorkspaceDocument",
]
