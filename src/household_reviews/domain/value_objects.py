from dataclasses import dataclass
from datetime import date
from enum import Enum

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class Segment(str, Enum):
    BLACK = "Black"
    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"


class Priority(str, Enum):
    STANDARD = "Standard"
    VIP = "VIP"
    HIGH = "High"


class ReviewType(str, Enum):
    REQUIRED = "Required"
    PERIODIC = "Periodic"


class ReviewStatus(str, Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    OVERDUE = "Overdue"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class AdvanceKind(str, Enum):
    NONE = "none"
    NEXT_MONTH = "next_month"
    CUSTOM_DATE = "custom_date"


@dataclass(frozen=True)
class AdvanceOption:
    """How the next review date moves when a review is completed."""

    kind: AdvanceKind
    custom_date: date | None = None

    def __post_init__(self) -> None:
        if self.kind == AdvanceKind.CUSTOM_DATE and self.custom_date is None:
            raise ValueError("custom_date is required for a custom advance")
        if self.kind != AdvanceKind.CUSTOM_DATE and self.custom_date is not None:
            raise ValueError(f"custom_date is not allowed for {self.kind.value}")

    @classmethod
    def none(cls) -> "AdvanceOption":
        return cls(AdvanceKind.NONE)

    @classmethod
    def next_month(cls) -> "AdvanceOption":
        return cls(AdvanceKind.NEXT_MONTH)

    @classmethod
    def custom(cls, next_date: date) -> "AdvanceOption":
        return cls(AdvanceKind.CUSTOM_DATE, next_date)


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return MONTHS[month - 1]


def parse_month(value: str | int) -> int:
    """Accept a month number or a (case-insensitive, possibly abbreviated) name."""
    if isinstance(value, int):
        month_name(value)
        return value
    text = value.strip()
    if text.isdigit():
        return parse_month(int(text))
    for index, name in enumerate(MONTHS, start=1):
        if len(text) >= 3 and name.lower().startswith(text.lower()):
            return index
    raise ValueError(f"Unknown month: {value!r}")
