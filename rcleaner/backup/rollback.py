from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from result import Err, Ok, Result

from rcleaner.backup.store import BackupStore
from rcleaner.models.backup import BackupItem
from rcleaner.models.enums import ErrorCode
from rcleaner.models.errors import CleanerError
from rcleaner.services.fingerprint import hash_path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RollbackReport:
    backup_id: str
    restored: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _restore_item(item: BackupItem) -> None:
    backup_path = Path(item.backup_path)
    original = Path(item.original_path)
    if backup_path.is_dir() and not backup_path.is_symlink():
        original.mkdir(parents=True, exist_ok=True)
        shutil.copytree(backup_path, original, symlinks=True, dirs_exist_ok=True)
        return
    original.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(backup_path, original, follow_symlinks=False)


def _present(item: BackupItem) -> bool:
    path = Path(item.backup_path)
    return path.exists() or path.is_symlink()


def verify_backup_items(items: tuple[BackupItem, ...]) -> Result[None, CleanerError]:
    """Check that every present backup copy still matches its recorded checksum."""
    for item in items:
        if not _present(item):
            continue
        try:
            actual = hash_path(Path(item.backup_path))
        except OSError as exc:
            return Err(CleanerError.from_os_error(exc, ErrorCode.BACKUP))
        if actual != item.checksum:
            return Err(CleanerError(ErrorCode.BACKUP, f"Checksum mismatch for {item.backup_path}"))
    return Ok(None)


def perform_rollback(store: BackupStore, backup_id: str, *, verify: bool = False) -> Result[RollbackReport, CleanerError]:
    """Copy every item of a generation back onto its original path.

    Items whose backup copy has disappeared are skipped.  The stored checksums
    are only consulted when *verify* is set; a mismatch then aborts the
    rollback before anything is written.
    """
    loaded = store.load_backup(backup_id)
    if isinstance(loaded, Err):
        return loaded
    backup = loaded.unwrap()

    if verify:
        verified = verify_backup_items(backup.items)
        if isinstance(verified, Err):
            return verified

    report = RollbackReport(backup_id=backup.id)
    for item in backup.items:
        if not _present(item):
            logger.warning("Backup copy missing, skipping %s", item.backup_path)
            report.skipped.append(item.original_path)
            continue
        try:
            _restore_item(item)
        except OSError as exc:
            return Err(CleanerError.from_os_error(exc))
        report.restored.append(item.original_path)

    logger.info("Rolled back %s: %d restored, %d skipped", backup.id, len(report.restored), len(report.skipped))
    return Ok(report)
