from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import override

from result import Ok, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import CleanerBase, remove_contents
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.services.fingerprint import path_size
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner


def default_temp_dirs(home: Path) -> list[tuple[str, Path]]:
    return [
        ("Temporary files (/tmp)", Path("/tmp")),
        ("Temporary files (/var/tmp)", Path("/var/tmp")),
        ("Trash", home / ".local" / "share" / "Trash"),
    ]


class TempFilesCleaner(CleanerBase):
    """Empties temp directories and the trash; the directories themselves stay."""

    name = "Temp Files Cleaner"
    category = CleanupCategory.TEMP_FILES

    def __init__(
        self,
        store: BackupStore,
        runner: CommandRunner = DEFAULT_RUNNER,
        *,
        home: Path | None = None,
        targets: Sequence[tuple[str, Path]] | None = None,
    ) -> None:
        super().__init__(store, runner)
        self._targets = list(targets) if targets is not None else default_temp_dirs(home or Path.home())

    @override
    def _scan_items(self) -> list[CleanupItem]:
        items: list[CleanupItem] = []
        for label, path in self._targets:
            size = path_size(path)
            if size > 0:
                items.append(
                    self._item(
                        str(path),
                        label,
                        CleanupSource.filesystem(),
                        path=str(path),
                        size=size,
                        description=f"Temporary directory: {path}",
                    )
                )
        return items

    @override
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        self._clean_paths(items, dry_run, result, remover=remove_contents)
        return Ok(None)
