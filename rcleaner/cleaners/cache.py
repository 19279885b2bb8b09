from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import override

from result import Ok, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import CleanerBase
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.services.fingerprint import path_size
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner

# (label, path relative to the home directory)
CACHE_DIRS: tuple[tuple[str, str], ...] = (
    ("User cache", ".cache"),
    ("Thumbnails", ".cache/thumbnails"),
    ("Firefox cache", ".cache/mozilla/firefox"),
    ("Chrome cache", ".cache/google-chrome"),
    ("Chromium cache", ".cache/chromium"),
    ("Brave cache", ".cache/BraveSoftware"),
    ("Shader cache", ".cache/mesa_shader_cache"),
)


class CacheCleaner(CleanerBase):
    """User and browser caches, plus the per-app caches of Flatpak apps."""

    name = "Cache Cleaner"
    category = CleanupCategory.CACHE

    def __init__(
        self,
        store: BackupStore,
        runner: CommandRunner = DEFAULT_RUNNER,
        *,
        home: Path | None = None,
        targets: Sequence[tuple[str, Path]] | None = None,
    ) -> None:
        super().__init__(store, runner)
        self._home = home or Path.home()
        if targets is None:
            targets = [(label, self._home / relative) for label, relative in CACHE_DIRS]
        self._targets = list(targets)

    @property
    def flatpak_root(self) -> Path:
        return self._home / ".var" / "app"

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
                        description=f"Cache directory: {path}",
                    )
                )
        items.extend(self._scan_flatpak_caches())
        return items

    def _scan_flatpak_caches(self) -> list[CleanupItem]:
        if not self.flatpak_root.is_dir():
            return []
        items: list[CleanupItem] = []
        for app_dir in sorted(self.flatpak_root.iterdir()):
            cache = app_dir / "cache"
            size = path_size(cache)
            if size > 0:
                items.append(
                    self._item(
                        str(cache),
                        f"Flatpak cache: {app_dir.name}",
                        CleanupSource.filesystem(),
                        path=str(cache),
                        size=size,
                        description=f"Flatpak cache directory: {cache}",
                    )
                )
        return items

    @override
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        self._clean_paths(items, dry_run, result)
        return Ok(None)
