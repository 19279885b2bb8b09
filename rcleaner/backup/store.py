# Backup generations on disk.
#
# Layout:
#   <root>/<generation_id>/metadata.json        serialized Backup, written last
#   <root>/<generation_id>/<sanitized path>     copy of each backed-up path
#
# A generation without readable metadata is never listed, so a crash between
# copying and writing metadata leaves an invisible directory, not a corrupt
# generation.
#
# Capacity (max_size > 0):
#   Before writing a new generation of estimated size S, generations are
#   evicted oldest-first (by timestamp) until total + S <= max_size.  S larger
#   than max_size fails up front with nothing deleted.  After writing, the
#   same FIFO eviction runs again against the actual sizes.  Restoring from a
#   generation never refreshes its position.

from __future__ import annotations

import json
import logging
import os
import shutil
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path, PurePath

from result import Err, Ok, Result

from rcleaner.config.schema import AppConfig
from rcleaner.models.backup import Backup, BackupItem
from rcleaner.models.cleanup import CleanupItem
from rcleaner.models.enums import ErrorCode
from rcleaner.models.errors import CleanerError
from rcleaner.services.fingerprint import estimate_total_size, hash_path, path_size

logger = logging.getLogger(__name__)

METADATA_FILE = "metadata.json"
BACKUP_DIR = "~/.local/share/rcleaner/backups"


def default_backup_dir() -> Path:
    return Path(BACKUP_DIR).expanduser()


def collect_paths(items: Sequence[CleanupItem]) -> list[Path]:
    """Paths of cleanable items, minus any path nested inside another candidate.

    Candidates are visited shortest-first so an ancestor is always selected
    before its descendants, which are then dropped.
    """
    candidates = sorted(
        (Path(item.path) for item in items if item.can_clean and item.path is not None),
        key=lambda p: len(str(p)),
    )
    selected: list[Path] = []
    for path in candidates:
        if any(path.is_relative_to(root) for root in selected):
            continue
        selected.append(path)
    return selected


def sanitize_path(path: PurePath) -> PurePath:
    """Strip root, ``.`` and ``..`` components so the result stays relative."""
    parts = [part for part in path.parts if part not in {path.anchor, "", ".", ".."}]
    return PurePath(*parts)


def is_generation_id(backup_id: str) -> bool:
    """True when *backup_id* is exactly one plain path component."""
    return backup_id not in {"", ".", ".."} and PurePath(backup_id).name == backup_id


def _copy_path(source: Path, dest: Path) -> None:
    if source.is_dir() and not source.is_symlink():
        shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)
        return
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, dest, follow_symlinks=False)


class BackupStore:
    """Owns the backup directory tree: create, list, load and delete generations."""

    def __init__(self, root: Path, max_size: int = 0) -> None:
        self.root = root
        self.max_size = max(0, max_size)

    @classmethod
    def from_config(cls, config: AppConfig, root: Path | None = None) -> BackupStore:
        return cls(root or default_backup_dir(), config.current_profile().max_backup_size_bytes)

    def create_backup(self, items: Sequence[CleanupItem]) -> Result[Backup | None, CleanerError]:
        selected = [path for path in collect_paths(items) if path.exists() or path.is_symlink()]
        if not selected:
            return Ok(None)

        try:
            estimated = estimate_total_size(selected)
        except OSError as exc:
            return Err(CleanerError.from_os_error(exc, ErrorCode.BACKUP))

        capacity = self._ensure_capacity(estimated)
        if isinstance(capacity, Err):
            return capacity

        generation = self._new_generation_dir()
        if isinstance(generation, Err):
            return generation
        backup_root = generation.unwrap()

        backup_items: list[BackupItem] = []
        for source in selected:
            dest = backup_root / sanitize_path(source)
            try:
                _copy_path(source, dest)
                backup_items.append(
                    BackupItem(
                        original_path=str(source),
                        backup_path=str(dest),
                        size=path_size(source),
                        checksum=hash_path(source),
                    )
                )
            except OSError as exc:
                shutil.rmtree(backup_root, ignore_errors=True)
                return Err(CleanerError(ErrorCode.BACKUP, f"Failed to back up {source}: {exc}"))

        backup = Backup(
            id=backup_root.name,
            timestamp=datetime.now(UTC),
            items=tuple(backup_items),
            size=sum(item.size for item in backup_items),
        )
        written = self._write_metadata(backup_root, backup)
        if isinstance(written, Err):
            shutil.rmtree(backup_root, ignore_errors=True)
            return written
        logger.info("Created backup %s (%d items, %d bytes)", backup.id, len(backup.items), backup.size)

        enforced = self._enforce_max_size()
        if isinstance(enforced, Err):
            return enforced
        return Ok(backup)

    def list_backups(self) -> list[Backup]:
        """All readable generations, oldest first.  Unreadable ones are skipped."""
        if not self.root.is_dir():
            return []
        backups: list[Backup] = []
        for entry in self.root.iterdir():
            if not entry.is_dir():
                continue
            loaded = self._read_metadata(entry / METADATA_FILE)
            if isinstance(loaded, Ok):
                backups.append(loaded.unwrap())
            else:
                logger.debug("Skipping %s: %s", entry, loaded.unwrap_err())
        backups.sort(key=lambda b: b.timestamp)
        return backups

    def load_backup(self, backup_id: str) -> Result[Backup, CleanerError]:
        if not is_generation_id(backup_id):
            return Err(CleanerError(ErrorCode.NOT_FOUND, f"No such backup: {backup_id!r}"))
        return self._read_metadata(self.root / backup_id / METADATA_FILE)

    def delete_backup(self, backup_id: str) -> Result[None, CleanerError]:
        # Anything but a single directory name cannot be a generation under root.
        if not is_generation_id(backup_id):
            return Ok(None)
        target = self.root / backup_id
        if not target.exists():
            return Ok(None)
        try:
            shutil.rmtree(target)
        except OSError as exc:
            return Err(CleanerError.from_os_error(exc))
        return Ok(None)

    def total_size(self) -> int:
        return sum(backup.size for backup in self.list_backups())

    # -- capacity -----------------------------------------------------------

    def _ensure_capacity(self, incoming: int) -> Result[None, CleanerError]:
        if self.max_size == 0:
            return Ok(None)
        if incoming > self.max_size:
            return Err(CleanerError(ErrorCode.BACKUP, f"Backup size {incoming} exceeds limit {self.max_size}"))

        backups = self.list_backups()
        total = sum(backup.size for backup in backups)
        for backup in backups:
            if total + incoming <= self.max_size:
                break
            deleted = self._evict(backup)
            if isinstance(deleted, Err):
                return deleted
            total -= backup.size

        if total + incoming > self.max_size:
            return Err(CleanerError(ErrorCode.BACKUP, f"Insufficient backup capacity for size {incoming}"))
        return Ok(None)

    def _enforce_max_size(self) -> Result[None, CleanerError]:
        if self.max_size == 0:
            return Ok(None)
        backups = self.list_backups()
        total = sum(backup.size for backup in backups)
        for backup in backups:
            if total <= self.max_size:
                break
            deleted = self._evict(backup)
            if isinstance(deleted, Err):
                return deleted
            total -= backup.size
        return Ok(None)

    def _evict(self, backup: Backup) -> Result[None, CleanerError]:
        logger.info("Evicting backup %s (%d bytes) to stay within %d bytes", backup.id, backup.size, self.max_size)
        return self.delete_backup(backup.id)

    # -- storage ------------------------------------------------------------

    def _new_generation_dir(self) -> Result[Path, CleanerError]:
        base = f"backup-{datetime.now(UTC):%Y%m%d%H%M%S}-{os.getpid()}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            suffix = 0
            while True:
                name = base if suffix == 0 else f"{base}-{suffix}"
                candidate = self.root / name
                try:
                    candidate.mkdir()
                except FileExistsError:
                    suffix += 1
                    continue
                return Ok(candidate)
        except OSError as exc:
            return Err(CleanerError.from_os_error(exc, ErrorCode.BACKUP))

    def _write_metadata(self, backup_root: Path, backup: Backup) -> Result[None, CleanerError]:
        try:
            content = json.dumps(backup.to_dict(), indent=2)
        except (TypeError, ValueError) as exc:
            return Err(CleanerError(ErrorCode.SERIALIZATION, str(exc)))
        try:
            (backup_root / METADATA_FILE).write_text(content, encoding="utf-8")
        except OSError as exc:
            return Err(CleanerError.from_os_error(exc, ErrorCode.BACKUP))
        return Ok(None)

    def _read_metadata(self, metadata_path: Path) -> Result[Backup, CleanerError]:
        try:
            payload = json.loads(metadata_path.read_text(encoding="utf-8"))
            return Ok(Backup.from_dict(payload))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            return Err(CleanerError(ErrorCode.NOT_FOUND, f"Backup metadata unavailable at {metadata_path}: {exc}"))
