from __future__ import annotations

import logging

from result import Ok, Result

from rcleaner.models.errors import CleanerError
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner
from rcleaner.system.package_managers import create_package_manager

logger = logging.getLogger(__name__)

# Backends that can answer "who requires this package".
DEPENDENCY_BACKENDS: tuple[str, ...] = ("apt", "dnf", "pacman", "rpm")


class DependencyOracle:
    """Answers which installed packages depend on a given package.

    An unknown backend, or one whose tool is not installed, reports no
    dependents.  A tool that is present but fails yields ``Err``.
    """

    def __init__(self, runner: CommandRunner = DEFAULT_RUNNER) -> None:
        self._runner = runner

    def check_dependencies(self, backend: str, package: str) -> Result[list[str], CleanerError]:
        if backend not in DEPENDENCY_BACKENDS:
            return Ok([])
        manager = create_package_manager(backend, self._runner)
        if manager is None or not manager.is_available():
            logger.debug("%s not available, assuming %s has no dependents", backend, package)
            return Ok([])
        return manager.check_dependencies(package)
