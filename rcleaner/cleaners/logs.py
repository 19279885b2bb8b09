# Rotated log files and the systemd journal.
#
# /var/log is offered as one item whose size is the total of its rotated
# files (*.gz *.xz *.bz2 *.zip *.old, *.1 .. *.5).  Cleaning removes only
# those files, so the live logs keep being written.  Dry-run walks the same
# files and reports the same count and bytes without deleting.
#
# The journal item has no path; it is vacuumed with journalctl.

from __future__ import annotations

import logging
from pathlib import Path
from typing import override

from result import Err, Ok, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import CleanerBase
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.services.fingerprint import iter_tree_files
from rcleaner.services.formatting import parse_size
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner, run_checked

logger = logging.getLogger(__name__)

LOG_DIR = Path("/var/log")
JOURNAL_ITEM_ID = "systemd-journal"
JOURNAL_RETENTION = "7d"

_ROTATED_EXTENSIONS = frozenset({".gz", ".xz", ".bz2", ".zip", ".old"})
_ROTATED_SUFFIXES = tuple(f".{n}" for n in range(1, 6))


def is_rotated_log(path: Path) -> bool:
    return path.suffix in _ROTATED_EXTENSIONS or path.name.endswith(_ROTATED_SUFFIXES)


def rotated_logs(root: Path) -> list[tuple[Path, int]]:
    found: list[tuple[Path, int]] = []
    for _, full in iter_tree_files(root):
        if not is_rotated_log(full):
            continue
        try:
            found.append((full, full.stat().st_size))
        except OSError:
            continue
    return found


def parse_journal_usage(output: str) -> int | None:
    """First size-looking token of ``journalctl --disk-usage`` output."""
    for token in output.split():
        if any(c.isdigit() for c in token) and any(c.isalpha() for c in token):
            size = parse_size(token)
            if size is not None:
                return size
    return None


class LogsCleaner(CleanerBase):
    name = "Logs Cleaner"
    category = CleanupCategory.LOGS

    def __init__(
        self,
        store: BackupStore,
        runner: CommandRunner = DEFAULT_RUNNER,
        *,
        log_dir: Path = LOG_DIR,
    ) -> None:
        super().__init__(store, runner)
        self._log_dir = log_dir

    @override
    def _scan_items(self) -> list[CleanupItem]:
        items: list[CleanupItem] = []
        if self._log_dir.is_dir():
            size = sum(size for _, size in rotated_logs(self._log_dir))
            if size > 0:
                items.append(
                    self._item(
                        str(self._log_dir),
                        "System logs",
                        CleanupSource.filesystem(),
                        path=str(self._log_dir),
                        size=size,
                        description=f"Rotated logs under {self._log_dir}",
                    )
                )
        journal = self._scan_journal()
        if journal is not None:
            items.append(journal)
        return items

    def _scan_journal(self) -> CleanupItem | None:
        if not self._runner.exists("journalctl"):
            return None
        usage = run_checked(self._runner, "journalctl", ["--disk-usage"])
        if isinstance(usage, Err):
            logger.warning("Skipping journal: %s", usage.unwrap_err())
            return None
        stdout = usage.unwrap().stdout
        size = parse_journal_usage(stdout)
        if size is None:
            return None
        return self._item(
            JOURNAL_ITEM_ID,
            "systemd journal",
            CleanupSource.filesystem(),
            size=size,
            description=stdout.strip(),
        )

    @override
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        for item in items:
            if item.id == JOURNAL_ITEM_ID:
                self._vacuum_journal(item, dry_run, result)
            elif item.path is None:
                result.skipped_items += 1
            else:
                self._clean_rotated(Path(item.path), dry_run, result)
        return Ok(None)

    def _vacuum_journal(self, item: CleanupItem, dry_run: bool, result: CleanupResult) -> None:
        if dry_run:
            logger.info("[DRY RUN] Would vacuum systemd journal")
            result.record_cleaned(item.size)
            return
        vacuum = run_checked(self._runner, "journalctl", [f"--vacuum-time={JOURNAL_RETENTION}"])
        if isinstance(vacuum, Err):
            result.errors.append(str(vacuum.unwrap_err()))
            return
        result.record_cleaned(item.size)

    def _clean_rotated(self, root: Path, dry_run: bool, result: CleanupResult) -> None:
        freed = 0
        for path, size in rotated_logs(root):
            if dry_run:
                logger.info("[DRY RUN] Would remove: %s", path)
                freed += size
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                result.errors.append(f"{path}: {exc}")
                continue
            freed += size
        result.record_cleaned(freed)
