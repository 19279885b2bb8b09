from __future__ import annotations

import logging
from typing import override

from result import Err, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import BatchRemover, CleanerBase
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner
from rcleaner.system.containers import CONTAINER_RUNTIMES, ContainerRuntime
from rcleaner.system.package_managers import FlatpakManager, SnapManager

logger = logging.getLogger(__name__)


class ApplicationsCleaner(CleanerBase):
    """Flatpak and Snap applications, and Docker / Podman images."""

    name = "Applications Cleaner"
    category = CleanupCategory.APPLICATIONS

    def __init__(self, store: BackupStore, runner: CommandRunner = DEFAULT_RUNNER) -> None:
        super().__init__(store, runner)
        self._flatpak = FlatpakManager(runner)
        self._snap = SnapManager(runner)
        self._runtimes = [ContainerRuntime(name, runner) for name in CONTAINER_RUNTIMES]

    @override
    def _scan_items(self) -> list[CleanupItem]:
        items: list[CleanupItem] = []
        for manager, kind in ((self._flatpak, "Flatpak"), (self._snap, "Snap")):
            if not manager.is_available():
                continue
            listed = manager.list_installed_with_sizes()
            if isinstance(listed, Err):
                logger.warning("%s scan failed: %s", manager.name, listed.unwrap_err())
                continue
            for app, size in listed.unwrap():
                items.append(
                    self._item(
                        f"{manager.name}:{app}",
                        app,
                        CleanupSource.package_manager(manager.name),
                        size=size,
                        description=f"{kind} application",
                    )
                )

        for runtime in self._runtimes:
            if not runtime.is_available():
                continue
            images = runtime.list_images()
            if isinstance(images, Err):
                logger.warning("%s scan failed: %s", runtime.name, images.unwrap_err())
                continue
            for image in images.unwrap():
                items.append(
                    self._item(
                        f"{runtime.name}:{image.reference}",
                        image.reference,
                        CleanupSource.container(runtime.name),
                        size=image.size,
                        description=f"Container image ({runtime.name})",
                    )
                )
        return items

    @override
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        removers: dict[str, BatchRemover] = {
            self._flatpak.name: self._flatpak.remove_packages,
            self._snap.name: self._snap.remove_packages,
        }
        for runtime in self._runtimes:
            removers[runtime.name] = runtime.remove_images
        return self._clean_batches(items, dry_run, result, removers)
