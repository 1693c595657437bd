"""Flat CSV extract of households, one row per household."""

import csv
from collections.abc import Iterable
from datetime import date
from io import StringIO
from pathlib import Path

from household_reviews.domain.households import Household
from household_reviews.repositories.memory import InMemoryHouseholdStore
from household_reviews.services.lifecycle import derive_status

EXPORT_COLUMNS = [
    "ID",
    "Name",
    "Segment",
    "Priority",
    "Review Type",
    "Status",
    "Next Review",
    "Last Completed",
    "Assigned Month",
    "AUC",
    "Members",
    "Notes",
]


def _format_members(household: Household) -> str:
    parts = []
    for member in household.members:
        parts.append(f"{member.name} ({member.role})" if member.role else member.name)
    return "; ".join(parts)


def _iso(value: date | None) -> str:
    return value.isoformat() if value else ""


def export_households_csv(
    store: InMemoryHouseholdStore,
    household_ids: Iterable[int] | None = None,
    today: date | None = None,
    output_path: Path | str | None = None,
) -> str:
    """
    Export households to CSV.

    Args:
        store: Source of the records.
        household_ids: Rows to include, usually the filter output. None
            exports everything. Rows keep the store's order.
        today: Reference date for the Status column.
        output_path: Path to write CSV (if None, returns string only)

    Returns:
        CSV content as string
    """
    today = today or date.today()
    wanted = None if household_ids is None else set(household_ids)

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)

    for household in store.all():
        if wanted is not None and household.id not in wanted:
            continue
        writer.writerow(
            [
                household.id,
                household.name,
                household.segment.value,
                household.priority.value,
                household.review_type.value,
                derive_status(household, today).value,
                _iso(household.next_review_date),
                _iso(household.last_completed_date),
                household.assigned_month or "",
                str(household.auc),
                _format_members(household),
                household.notes,
            ]
        )

    csv_content = output.getvalue()

    if output_path:
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            f.write(csv_content)

    return csv_content
