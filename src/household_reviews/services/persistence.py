"""Workspace persistence: atomic JSON saves, loading with upgrade, and backups.

All writes go through one lock, so a save requested while another is in
flight waits for it instead of interleaving with it. Every file is written to
a temporary sibling first and moved into place with ``os.replace``; a failed
write leaves the previous file untouched.
"""

import contextlib
import json
import os
import re
import shutil
import tempfile
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from household_reviews.exceptions import (
    BackupNotFoundError,
    FormatError,
    HouseholdReviewError,
    StorageIOError,
    ValidationError,
)
from household_reviews.logging_config import get_logger
from household_reviews.repositories.memory import (
    InMemoryHouseholdStore,
    validate_household,
)
from household_reviews.schemas import WorkspaceDocument
from household_reviews.services.interfaces import PersistenceService

logger = get_logger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S-%f"
_BACKUP_NAME = re.compile(
    r"^(?P<stem>.+)_backup_(?P<stamp>\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}-\d{6})\.json$"
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class BackupInfo:
    filename: str
    path: Path
    created: datetime
    size: int


@dataclass(frozen=True)
class FileInfo:
    path: Path
    size: int
    modified: datetime
    is_readonly: bool


def backup_filename(stem: str, created: datetime) -> str:
    return f"{stem}_backup_{created.strftime(BACKUP_TIMESTAMP_FORMAT)}.json"


def parse_backup_filename(filename: str) -> tuple[str, datetime] | None:
    """Split a backup file name into its source stem and creation time."""
    match = _BACKUP_NAME.match(filename)
    if match is None:
        return None
    created = datetime.strptime(match["stamp"], BACKUP_TIMESTAMP_FORMAT)
    return match["stem"], created.replace(tzinfo=UTC)


def _summarize_validation_error(error: PydanticValidationError) -> str:
    problems = []
    for item in error.errors()[:5]:
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}")
    if error.error_count() > 5:
        problems.append(f"... {error.error_count() - 5} more")
    return "; ".join(problems)


class JsonPersistenceManager(PersistenceService):
    """Sole writer of the workspace file and its backup directory."""

    def __init__(
        self,
        store: InMemoryHouseholdStore,
        path: Path | str | None = None,
        backup_dir: Path | str | None = None,
        default_backup_count: int = 10,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._path = Path(path) if path is not None else None
        self._backup_dir = Path(backup_dir) if backup_dir is not None else None
        self._default_backup_count = default_backup_count
        self._clock = clock
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        """The workspace file saves go to when no path is given."""
        if self._path is not None:
            return self._path
        last = self._store.settings.last_file_path
        return Path(last) if last else None

    def backup_dir_for(self, path: Path) -> Path:
        return self._backup_dir if self._backup_dir is not None else path.parent

    # -- save / load ---------------------------------------------------------

    def save(self, path: Path | str | None = None) -> Path:
        """Write the whole store to ``path`` (or the current workspace file).

        Raises:
            ValidationError: If no path is known.
            StorageIOError: If the file cannot be written. The previous file
                and the in-memory state are left untouched.
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValidationError("No workspace file has been chosen yet")

        with self._write_lock:
            revision = self._store.revision
            settings = self._store.settings
            previous_path = settings.last_file_path
            settings.last_file_path = str(target)
            payload = WorkspaceDocument.from_domain(self._store.all(), settings).to_json()

            if settings.auto_backup and target.exists():
                try:
                    self._create_backup(target)
                except StorageIOError as e:
                    logger.warning("pre_save_backup_failed", path=str(target), error=e.message)

            try:
                self._atomic_write(target, payload)
            except StorageIOError:
                settings.last_file_path = previous_path
                raise
            self._path = target
            self._store.mark_clean(revision)

        logger.info("workspace_saved", path=str(target), households=len(self._store))
        return target

    def load(self, path: Path | str) -> None:
        """Replace the store's contents with the document at ``path``.

        A missing file starts an empty workspace bound to that path.

        Raises:
            StorageIOError: If the file exists but cannot be read.
            FormatError: If the file is not a valid workspace document. The
                store is left untouched.
        """
        source = Path(path)
        if not source.exists():
            document = WorkspaceDocument()
            document.settings.backup_count = self._default_backup_count
            logger.info("workspace_created", path=str(source))
        else:
            document = self._read_document(source)
        self._apply(document, source)

    def _read_document(self, source: Path) -> WorkspaceDocument:
        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageIOError("read", source, str(e)) from e

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(source, f"not valid JSON ({e.msg} at line {e.lineno})") from e
        if not isinstance(raw, dict):
            raise FormatError(source, "expected a JSON object at the top level")

        try:
            document = WorkspaceDocument.model_validate(raw)
        except PydanticValidationError as e:
            raise FormatError(source, _summarize_validation_error(e)) from e
        return document

    def _apply(self, document: WorkspaceDocument, source: Path) -> None:
        households = [item.to_domain() for item in document.households]
        seen: set[int] = set()
        for household in households:
            if household.id in seen:
                raise FormatError(source, f"duplicate household id {household.id}")
            seen.add(household.id)
            try:
                validate_household(household)
            except HouseholdReviewError as e:
                raise FormatError(source, f"household {household.id}: {e.message}") from e

        settings = document.settings.to_domain()
        settings.last_file_path = str(source)
        self._store.replace_all(households, settings)
        self._path = source
        logger.info(
            "workspace_loaded",
            path=str(source),
            version=document.version,
            households=len(households),
        )

    # -- backups -------------------------------------------------------------

    def backup(self) -> Path | None:
        """Copy the current workspace file to a timestamped backup.

        Keeps the newest ``backup_count`` backups and deletes the rest. A
        backup count of zero disables backups and removes existing ones.

        Raises:
            ValidationError: If no workspace file has been chosen.
            StorageIOError: If the file is missing or the copy fails.
        """
        source = self.path
        if source is None:
            raise ValidationError("No workspace file has been chosen yet")
        with self._write_lock:
            if self._store.settings.backup_count == 0:
                logger.debug("backups_disabled", path=str(source))
                self._evict_backups(source)
                return None
            if not source.exists():
                raise StorageIOError("back up", source, "file does not exist")
            return self._create_backup(source)

    def _create_backup(self, source: Path) -> Path:
        directory = self.backup_dir_for(source)
        created = self._clock()
        target = directory / backup_filename(source.stem, created)
        while target.exists():
            created += timedelta(microseconds=1)
            target = directory / backup_filename(source.stem, created)

        try:
            directory.mkdir(parents=True, exist_ok=True)
            self._atomic_write(target, source.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageIOError("back up", source, str(e)) from e

        logger.info("backup_created", path=str(target))
        self._evict_backups(source)
        return target

    def _evict_backups(self, source: Path) -> None:
        keep = self._store.settings.backup_count
        for info in self._backups_for(source)[keep:]:
            try:
                info.path.unlink()
                logger.info("backup_evicted", path=str(info.path))
            except OSError as e:
                logger.warning("backup_eviction_failed", path=str(info.path), error=str(e))

    def _backups_for(self, source: Path) -> list[BackupInfo]:
        directory = self.backup_dir_for(source)
        if not directory.is_dir():
            return []
        backups = []
        for entry in directory.iterdir():
            parsed = parse_backup_filename(entry.name)
            if parsed is None or parsed[0] != source.stem or not entry.is_file():
                continue
            backups.append(
                BackupInfo(
                    filename=entry.name,
                    path=entry,
                    created=parsed[1],
                    size=entry.stat().st_size,
                )
            )
        backups.sort(key=lambda info: info.created, reverse=True)
        return backups

    def list_backups(self) -> list[BackupInfo]:
        """Backups of the current workspace file, newest first."""
        source = self.path
        if source is None:
            return []
        return self._backups_for(source)

    def restore_backup(self, backup_path: Path | str) -> None:
        """Overwrite the workspace file with a backup and reload it.

        The backup is validated before anything is written.

        Raises:
            BackupNotFoundError: If the backup does not exist.
            FormatError: If the backup is not a valid workspace document.
            StorageIOError: If the workspace file cannot be written.
        """
        backup = Path(backup_path)
        if not backup.is_file():
            raise BackupNotFoundError(backup)
        target = self.path
        if target is None:
            raise ValidationError("No workspace file has been chosen yet")

        document = self._read_document(backup)
        with self._write_lock:
            self._atomic_write(target, backup.read_text(encoding="utf-8"))
        self._apply(document, target)
        logger.info("backup_restored", backup=str(backup), path=str(target))

    def delete_backup(self, backup_path: Path | str) -> None:
        backup = Path(backup_path)
        if parse_backup_filename(backup.name) is None:
            raise ValidationError(
                f"Not a backup file: {backup.name}", context={"path": str(backup)}
            )
        if not backup.is_file():
            raise BackupNotFoundError(backup)
        with self._write_lock:
            try:
                backup.unlink()
            except OSError as e:
                raise StorageIOError("delete", backup, str(e)) from e
        logger.info("backup_deleted", path=str(backup))

    def file_info(self, path: Path | str | None = None) -> FileInfo:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValidationError("No workspace file has been chosen yet")
        try:
            stat = target.stat()
        except FileNotFoundError as e:
            raise StorageIOError("inspect", target, "file does not exist") from e
        except OSError as e:
            raise StorageIOError("inspect", target, str(e)) from e
        return FileInfo(
            path=target,
            size=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime, UTC),
            is_readonly=not os.access(target, os.W_OK),
        )

    # -- file helpers --------------------------------------------------------

    @staticmethod
    def _atomic_write(target: Path, content: str) -> None:
        tmp_name: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            if target.exists():
                shutil.copymode(target, tmp_name)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageIOError("write", target, str(e)) from e
