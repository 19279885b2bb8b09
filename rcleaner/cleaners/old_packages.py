from __future__ import annotations

import logging
from collections.abc import Callable
from typing import override

from result import Err, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import BatchRemover, CleanerBase
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner, run_checked, split_lines
from rcleaner.system.package_managers import AptManager, DnfManager, PacmanManager, RpmManager

logger = logging.getLogger(__name__)


def parse_apt_autoremove(output: str) -> list[str]:
    """Package names from the ``Remv`` lines of ``apt-get -s autoremove``."""
    names: list[str] = []
    for line in split_lines(output):
        if line.startswith("Remv "):
            fields = line.split()
            if len(fields) > 1:
                names.append(fields[1])
    return names


# (backend, program, args, parser, description)
_ORPHAN_QUERIES: tuple[tuple[str, str, list[str], Callable[[str], list[str]], str], ...] = (
    ("apt", "apt-get", ["-s", "autoremove"], parse_apt_autoremove, "APT autoremove candidate"),
    ("dnf", "dnf", ["repoquery", "--unneeded", "--qf", "%{name}"], split_lines, "DNF unneeded package"),
    ("pacman", "pacman", ["-Qtdq"], split_lines, "Pacman orphaned package"),
)


class OldPackagesCleaner(CleanerBase):
    """Packages nothing depends on any more (autoremove candidates, orphans)."""

    name = "Old Packages Cleaner"
    category = CleanupCategory.OLD_PACKAGES

    def __init__(self, store: BackupStore, runner: CommandRunner = DEFAULT_RUNNER) -> None:
        super().__init__(store, runner)
        self._managers = [AptManager(runner), DnfManager(runner), PacmanManager(runner), RpmManager(runner)]

    @override
    def _scan_items(self) -> list[CleanupItem]:
        items: list[CleanupItem] = []
        for backend, program, args, parse, description in _ORPHAN_QUERIES:
            if not self._runner.exists(program):
                continue
            output = run_checked(self._runner, program, args)
            if isinstance(output, Err):
                logger.warning("%s orphan query failed: %s", backend, output.unwrap_err())
                continue
            for package in parse(output.unwrap().stdout):
                items.append(
                    self._item(
                        f"{backend}:{package}",
                        package,
                        CleanupSource.package_manager(backend),
                        description=description,
                    )
                )
        return items

    @override
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        removers: dict[str, BatchRemover] = {manager.name: manager.remove_packages for manager in self._managers}
        return self._clean_batches(items, dry_run, result, removers)
