# Cleaner contract and shared removal machinery.
#
# Architecture:
#   CleanerBase uses the Template Method pattern: subclasses implement
#   _scan_items (find candidates) and _clean_items (remove actionable items),
#   while the base class owns the parts every backend must get right:
#     1. back up the given items before anything is mutated (skipped on
#        dry-run, fatal to this clean when it fails)
#     2. count items the safety checker blocked as skipped, never act on them
#     3. hand only actionable items to the subclass
#
# Per-item failures land in CleanupResult.errors and processing continues.
# A backend-level failure is returned as Err and aborts only this backend.

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from result import Err, Ok, Result

from rcleaner.backup.store import BackupStore
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner

logger = logging.getLogger(__name__)

type PathRemover = Callable[[Path], None]
type BatchRemover = Callable[[Sequence[str], bool], Result[None, CleanerError]]


class Cleaner(Protocol):
    name: str
    category: CleanupCategory

    def scan(self) -> list[CleanupItem]: ...

    def clean(self, items: Sequence[CleanupItem], dry_run: bool) -> Result[CleanupResult, CleanerError]: ...


def remove_path(path: Path) -> None:
    """Delete a file, link or directory tree.  A missing path is not an error."""
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
    elif path.is_dir():
        shutil.rmtree(path)


def remove_contents(path: Path) -> None:
    """Empty a directory but keep the directory itself."""
    if not path.is_dir():
        return
    for entry in path.iterdir():
        remove_path(entry)


class CleanerBase(ABC):
    """Template Method base for cleanup backends."""

    name: str = ""
    category: CleanupCategory

    def __init__(self, store: BackupStore, runner: CommandRunner = DEFAULT_RUNNER) -> None:
        self._store = store
        self._runner = runner

    @abstractmethod
    def _scan_items(self) -> list[CleanupItem]:
        """Enumerate candidates without changing anything on the system."""

    @abstractmethod
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        """Remove *items* (all actionable), recording outcomes into *result*."""

    def scan(self) -> list[CleanupItem]:
        return self._scan_items()

    def clean(self, items: Sequence[CleanupItem], dry_run: bool) -> Result[CleanupResult, CleanerError]:
        if not dry_run:
            backup = self._store.create_backup(items)
            if isinstance(backup, Err):
                return backup

        result = CleanupResult()
        actionable: list[CleanupItem] = []
        for item in items:
            if item.can_clean:
                actionable.append(item)
            else:
                result.skipped_items += 1

        if actionable:
            cleaned = self._clean_items(actionable, dry_run, result)
            if isinstance(cleaned, Err):
                return cleaned
        return Ok(result)

    def _item(
        self,
        id: str,
        name: str,
        source: CleanupSource,
        *,
        path: str | None = None,
        size: int = 0,
        description: str = "",
    ) -> CleanupItem:
        return CleanupItem(
            id=id,
            name=name,
            category=self.category,
            source=source,
            path=path,
            size=size,
            description=description,
        )

    # -- shared strategies ----------------------------------------------------

    def _clean_paths(
        self,
        items: list[CleanupItem],
        dry_run: bool,
        result: CleanupResult,
        remover: PathRemover = remove_path,
    ) -> None:
        """Remove each item's path, shallowest first.

        An item nested inside a path already handled in this call is skipped,
        so its bytes are only counted once through the ancestor.
        """
        handled: list[Path] = []
        for item in sorted(items, key=lambda i: len(i.path or "")):
            if item.path is None:
                result.skipped_items += 1
                continue
            path = Path(item.path)
            if any(path.is_relative_to(root) for root in handled):
                logger.debug("Skipping %s: covered by an ancestor", path)
                result.skipped_items += 1
                continue
            if dry_run:
                logger.info("[DRY RUN] Would clean: %s", item.path)
            else:
                try:
                    remover(path)
                except OSError as exc:
                    result.errors.append(f"{item.path}: {exc}")
                    continue
            handled.append(path)
            result.record_cleaned(item.size)

    def _clean_batches(
        self,
        items: list[CleanupItem],
        dry_run: bool,
        result: CleanupResult,
        removers: dict[str, BatchRemover],
    ) -> Result[None, CleanerError]:
        """Remove items in one batch per backend, keyed by ``item.source.name``.

        Items from a backend without a remover are skipped.  The first batch
        that fails aborts the rest.
        """
        batches: dict[str, list[CleanupItem]] = {name: [] for name in removers}
        for item in items:
            batch = batches.get(item.source.name)
            if batch is None:
                result.skipped_items += 1
                continue
            batch.append(item)

        for backend, batch in batches.items():
            if not batch:
                continue
            removed = removers[backend]([item.name for item in batch], dry_run)
            if isinstance(removed, Err):
                return removed
            for item in batch:
                result.record_cleaned(item.size)
        return Ok(None)
