# Installed kernel packages other than the running one.
#
# Candidates come from rpm (kernel, kernel-core, kernel-modules) and dpkg
# (linux-image-*).  Packages are grouped by the version embedded in their
# name; the running kernel's version is never offered, and of the remaining
# versions the ``keep`` newest are held back.  Unversioned meta packages
# (linux-image-generic) are never offered.

from __future__ import annotations

import logging
import platform
import re
from typing import override

from result import Err, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import BatchRemover, CleanerBase
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner, command_failed, split_lines
from rcleaner.system.package_managers import AptManager, RpmManager

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"\d+(?:\.\d+)+\S*")


def kernel_version(package: str) -> str | None:
    match = _VERSION_RE.search(package)
    return match.group(0) if match else None


def version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in re.findall(r"\d+", version))


def parse_rpm_kernels(output: str) -> list[str]:
    # rpm -q prints "package kernel is not installed" for missing names.
    return [line for line in split_lines(output) if " " not in line]


def parse_dpkg_kernels(output: str) -> list[str]:
    packages: list[str] = []
    for line in split_lines(output):
        if not line.startswith("ii"):
            continue
        fields = line.split()
        if len(fields) > 1 and "linux-image" in fields[1]:
            packages.append(fields[1])
    return packages


def select_removable(packages: list[str], current: str, keep: int) -> list[str]:
    """Packages of versions older than the *keep* newest non-running ones."""
    versions: dict[str, list[str]] = {}
    for package in packages:
        version = kernel_version(package)
        if version is None or (current and current in package):
            continue
        versions.setdefault(version, []).append(package)

    ordered = sorted(versions, key=version_key, reverse=True)
    removable: list[str] = []
    for version in ordered[max(0, keep):]:
        removable.extend(versions[version])
    return removable


class OldKernelsCleaner(CleanerBase):
    name = "Old Kernels Cleaner"
    category = CleanupCategory.OLD_KERNELS

    def __init__(
        self,
        store: BackupStore,
        runner: CommandRunner = DEFAULT_RUNNER,
        *,
        keep: int = 2,
        current_kernel: str | None = None,
    ) -> None:
        super().__init__(store, runner)
        self._keep = keep
        self._current = platform.release() if current_kernel is None else current_kernel
        self._rpm = RpmManager(runner)
        self._apt = AptManager(runner)

    def _query(self, program: str, args: list[str]) -> str | None:
        if not self._runner.exists(program):
            return None
        # rpm -q and dpkg -l exit non-zero when some of the names are not installed.
        ran = self._runner.run(program, args)
        if isinstance(ran, Err):
            logger.warning("Kernel query via %s failed: %s", program, ran.unwrap_err())
            return None
        output = ran.unwrap()
        if not output.success and not output.stdout.strip():
            logger.warning("Kernel query via %s failed: %s", program, command_failed(program, output))
            return None
        return output.stdout

    @override
    def _scan_items(self) -> list[CleanupItem]:
        items: list[CleanupItem] = []
        seen: set[str] = set()
        sources = (
            (self._rpm.name, "rpm", ["-q", "kernel", "kernel-core", "kernel-modules"], parse_rpm_kernels, "RPM"),
            (self._apt.name, "dpkg", ["-l", "linux-image-*"], parse_dpkg_kernels, "APT"),
        )
        for backend, program, args, parse, label in sources:
            stdout = self._query(program, args)
            if stdout is None:
                continue
            for package in select_removable(parse(stdout), self._current, self._keep):
                if package in seen:
                    continue
                seen.add(package)
                items.append(
                    self._item(
                        f"{backend}:{package}",
                        package,
                        CleanupSource.package_manager(backend),
                        description=f"Old kernel package ({label})",
                    )
                )
        return items

    @override
    def _clean_items(
        self, items: list[CleanupItem], dry_run: bool, result: CleanupResult
    ) -> Result[None, CleanerError]:
        removers: dict[str, BatchRemover] = {
            self._rpm.name: self._rpm.remove_packages,
            self._apt.name: self._apt.remove_packages,
        }
        return self._clean_batches(items, dry_run, result, removers)
