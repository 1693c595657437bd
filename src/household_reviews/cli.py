"""Command-line interface for the household review tracker."""

import argparse
import sys
from datetime import date
from datetime import datetime as dt
from decimal import Decimal, InvalidOperation
from pathlib import Path

from household_reviews.config import get_settings
from household_reviews.container import Container
from household_reviews.domain.households import Household, Person
from household_reviews.domain.value_objects import (
    AdvanceOption,
    Priority,
    ReviewType,
    Segment,
)
from household_reviews.exceptions import HouseholdReviewError
from household_reviews.logging_config import configure_logging
from household_reviews.services.export import export_households_csv
from household_reviews.services.filtering import QuickFilter, parse_category
from household_reviews.services.lifecycle import derive_status
from household_reviews.services.selection import BulkAction


def get_default_data_path() -> Path:
    """Get the default workspace file path."""
    return get_settings().data_file


def _data_path(args: argparse.Namespace) -> Path:
    file = getattr(args, "file", None)
    return Path(file) if file else get_default_data_path()


def _parse_date(value: str) -> date:
    return dt.strptime(value, "%Y-%m-%d").date()


def _as_of(args: argparse.Namespace) -> date:
    value = getattr(args, "as_of", None)
    return _parse_date(value) if value else date.today()


def open_workspace(args: argparse.Namespace) -> Container:
    """Build a container for the command and load its workspace file."""
    today = _as_of(args)
    container = Container(get_settings(), clock=lambda: today)
    container.open(_data_path(args))
    return container


def _parse_member(value: str) -> Person:
    name, _, role = value.partition(":")
    return Person(name=name.strip(), role=role.strip())


def _filter_ids(container: Container, args: argparse.Namespace) -> list[int]:
    quick = getattr(args, "quick", None)
    return container.filter_index.compute(
        query=getattr(args, "query", None) or "",
        category=parse_category(getattr(args, "category", None)),
        quick=QuickFilter(quick) if quick else None,
    )


def _advance_from_args(args: argparse.Namespace) -> AdvanceOption | None:
    if getattr(args, "custom_date", None):
        return AdvanceOption.custom(_parse_date(args.custom_date))
    if getattr(args, "next_month", False):
        return AdvanceOption.next_month()
    if getattr(args, "close", False):
        return AdvanceOption.none()
    return None


def cmd_init(args: argparse.Namespace) -> int:
    """Create a new, empty workspace file."""
    path = _data_path(args)

    if path.exists() and not args.force:
        print(f"Workspace already exists at {path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if path.exists() and args.force:
        path.unlink()

    try:
        with Container(get_settings()) as container:
            container.persistence.load(path)
            container.persistence.save(path)
    except HouseholdReviewError as e:
        print(f"Error: {e}")
        return 1

    print(f"Initialized workspace at {path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show review counts for the workspace."""
    path = _data_path(args)
    if not path.exists():
        print(f"No workspace found at {path}")
        print("Run 'hrv init' to create a new workspace")
        return 1

    try:
        with open_workspace(args) as container:
            stats = container.filter_index.stats()
            info = container.persistence.file_info()
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Workspace: {path}")
    print(f"Size: {info.size} bytes, modified {info.modified:%Y-%m-%d %H:%M} UTC")
    print(f"Households: {stats.total}")
    print(f"  Scheduled: {stats.scheduled}")
    print(f"  Completed: {stats.completed}")
    print(f"  Overdue:   {stats.overdue}")
    print(f"  VIP:       {stats.vip}")
    print(f"  High:      {stats.high_priority}")
    print(f"  Due this month: {stats.due_this_month}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List households matching the filters."""
    try:
        with open_workspace(args) as container:
            visible = _filter_ids(container, args)
            today = container.lifecycle.today()

            if not visible:
                print("No households found.")
                return 0

            print(f"{'ID':>5}  {'Name':<30} {'Segment':<7} {'Priority':<8} {'Status':<9} Next Review")
            print("=" * 78)
            for household_id in visible:
                h = container.store.get(household_id)
                status = derive_status(h, today).value
                due = h.next_review_date.isoformat() if h.next_review_date else "-"
                print(
                    f"{h.id:>5}  {h.name[:30]:<30} {h.segment.value:<7} "
                    f"{h.priority.value:<8} {status:<9} {due}"
                )
            print()
            print(f"{len(visible)} of {len(container.store)} households")
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    """Add a household."""
    try:
        household = Household(
            name=args.name,
            members=[_parse_member(m) for m in args.member or []],
            next_review_date=_parse_date(args.due),
            segment=Segment(args.segment),
            priority=Priority(args.priority),
            review_type=ReviewType(args.review_type),
            notes=args.notes or "",
            auc=Decimal(args.auc) if args.auc else Decimal("0"),
        )
        with open_workspace(args) as container:
            household_id = container.store.add(household)
            container.persistence.save()
    except (HouseholdReviewError, ValueError, InvalidOperation) as e:
        print(f"Error: {e}")
        return 1

    print(f"Added household {household_id}: {household.name}")
    return 0


def cmd_complete(args: argparse.Namespace) -> int:
    """Mark one household's review as completed."""
    try:
        with open_workspace(args) as container:
            household = container.lifecycle.complete(
                int(args.household_id), _advance_from_args(args)
            )
            container.persistence.save()
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    next_due = household.next_review_date.isoformat() if household.next_review_date else "none"
    print(f"Completed review for {household.name}")
    print(f"  Next review: {next_due}")
    return 0


def cmd_bulk(args: argparse.Namespace) -> int:
    """Apply a bulk action to selected households."""
    try:
        action = BulkAction(args.action)
        with open_workspace(args) as container:
            if args.visible:
                container.selection.select_all(_filter_ids(container, args))
            for household_id in args.ids:
                if household_id not in container.selection:
                    container.selection.toggle(household_id)
            if not len(container.selection):
                print("No households selected.")
                return 1

            result = container.bulk_actions.apply_bulk(
                action,
                advance=_advance_from_args(args),
                month=args.month,
            )
            container.persistence.save()
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Applied {action.value} to {result.count} households")
    if result.skipped:
        print(f"  Skipped (not found): {', '.join(str(i) for i in result.skipped)}")
    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    """Create a timestamped backup of the workspace file."""
    try:
        with open_workspace(args) as container:
            backup = container.persistence.backup()
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if backup is None:
        print("Backups are disabled (backup count is 0)")
    else:
        print(f"Created backup: {backup}")
    return 0


def cmd_backups(args: argparse.Namespace) -> int:
    """List backups of the workspace file."""
    try:
        with open_workspace(args) as container:
            backups = container.persistence.list_backups()
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if not backups:
        print("No backups found.")
        return 0

    print("Backups (newest first):")
    print("=" * 70)
    for b in backups:
        print(f"  {b.filename}")
        print(f"    Created: {b.created:%Y-%m-%d %H:%M:%S} UTC  Size: {b.size} bytes")
    return 0


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore the workspace file from a backup."""
    try:
        with open_workspace(args) as container:
            container.persistence.restore_backup(args.backup)
            count = len(container.store)
    except (HouseholdReviewError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Restored {count} households from {args.backup}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export matching households to CSV."""
    try:
        with open_workspace(args) as container:
            visible = _filter_ids(container, args)
            content = export_households_csv(
                container.store,
                visible,
                today=container.lifecycle.today(),
                output_path=args.output,
            )
    except (HouseholdReviewError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        print(f"Exported {len(visible)} households to {args.output}")
    else:
        print(content, end="")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    settings = get_settings()
    print(f"{settings.app_name} v{settings.app_version}")
    return 0


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--query", "-q", help="Search household and member names")
    parser.add_argument(
        "--category",
        "-c",
        help="Segment, review type or status (e.g. Red, Periodic, Overdue)",
    )
    parser.add_argument(
        "--quick",
        choices=[q.value for q in QuickFilter],
        help="Stat-card shortcut",
    )


def _add_advance_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--next-month", action="store_true", help="Advance the due date by one month"
    )
    group.add_argument("--custom-date", help="Next review date (YYYY-MM-DD)")
    group.add_argument(
        "--close", action="store_true", help="Do not schedule another review"
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hrv",
        description="Household Review Tracker - periodic financial review triage",
    )
    parser.add_argument(
        "--file",
        "-f",
        help="Path to the workspace JSON file",
        default=None,
    )
    parser.add_argument(
        "--as-of",
        help="Evaluate review status as of this date (YYYY-MM-DD)",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Create a new workspace file")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # status command
    status_parser = subparsers.add_parser("status", help="Show review counts")
    status_parser.set_defaults(func=cmd_status)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # list command
    list_parser = subparsers.add_parser("list", help="List households")
    _add_filter_arguments(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # add command
    add_parser = subparsers.add_parser("add", help="Add a household")
    add_parser.add_argument("--name", required=True, help="Household name")
    add_parser.add_argument(
        "--member",
        action="append",
        help="Member as NAME[:ROLE]; repeat for each member",
    )
    add_parser.add_argument("--due", required=True, help="Next review date (YYYY-MM-DD)")
    add_parser.add_argument(
        "--segment", choices=[s.value for s in Segment], default=Segment.GREEN.value
    )
    add_parser.add_argument(
        "--priority", choices=[p.value for p in Priority], default=Priority.STANDARD.value
    )
    add_parser.add_argument(
        "--review-type",
        choices=[r.value for r in ReviewType],
        default=ReviewType.PERIODIC.value,
    )
    add_parser.add_argument("--notes", help="Free-text notes")
    add_parser.add_argument("--auc", help="Assets under care")
    add_parser.set_defaults(func=cmd_add)

    # complete command
    complete_parser = subparsers.add_parser("complete", help="Complete a review")
    complete_parser.add_argument("household_id", type=int, help="Household ID")
    _add_advance_arguments(complete_parser)
    complete_parser.set_defaults(func=cmd_complete)

    # bulk command
    bulk_parser = subparsers.add_parser("bulk", help="Apply an action to many households")
    bulk_parser.add_argument(
        "action", choices=[a.value for a in BulkAction], help="Bulk action"
    )
    bulk_parser.add_argument("ids", nargs="*", type=int, help="Household IDs to select")
    bulk_parser.add_argument(
        "--visible",
        action="store_true",
        help="Select every household matching the filter flags",
    )
    bulk_parser.add_argument("--month", help="Month for assign_month (name or number)")
    _add_filter_arguments(bulk_parser)
    _add_advance_arguments(bulk_parser)
    bulk_parser.set_defaults(func=cmd_bulk)

    # backup commands
    backup_parser = subparsers.add_parser("backup", help="Create a backup")
    backup_parser.set_defaults(func=cmd_backup)

    backups_parser = subparsers.add_parser("backups", help="List backups")
    backups_parser.set_defaults(func=cmd_backups)

    restore_parser = subparsers.add_parser("restore", help="Restore from a backup")
    restore_parser.add_argument("backup", help="Backup file to restore")
    restore_parser.set_defaults(func=cmd_restore)

    # export command
    export_parser = subparsers.add_parser("export", help="Export households to CSV")
    export_parser.add_argument("--output", "-o", help="CSV file (default: stdout)")
    _add_filter_arguments(export_parser)
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging()
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
