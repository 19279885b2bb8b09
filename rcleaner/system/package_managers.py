# Package-manager backends.
#
# Every backend answers the same four questions through the command runner:
#   name                 -> "apt", "dnf", ...
#   list_installed()     -> installed package names
#   check_dependencies() -> installed packages that require the given one
#   remove_packages()    -> remove a batch, refusing if any has dependents
#
# Dry-run removals never invoke the tool; they only log what would run.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import override

from result import Err, Ok, Result

from rcleaner.models.enums import ErrorCode
from rcleaner.models.errors import CleanerError
from rcleaner.services.formatting import parse_size
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner, run_checked, split_lines

logger = logging.getLogger(__name__)

SNAPS_DIR = Path("/var/lib/snapd/snaps")


def _unique(names: list[str], exclude: str) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        if name == exclude or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


class PackageManager(ABC):
    name: str = ""
    # Binary whose presence means the backend can be queried.
    tool: str = ""

    def __init__(self, runner: CommandRunner = DEFAULT_RUNNER) -> None:
        self._runner = runner

    def is_available(self) -> bool:
        return self._runner.exists(self.tool)

    @abstractmethod
    def list_installed(self) -> Result[list[str], CleanerError]: ...

    @abstractmethod
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]: ...

    @abstractmethod
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]: ...

    def remove_packages(self, packages: Sequence[str], dry_run: bool) -> Result[None, CleanerError]:
        if not packages:
            return Ok(None)

        program, args = self._removal_command(packages)
        if dry_run:
            logger.info("[DRY RUN] %s %s", program, " ".join(args))
            return Ok(None)

        for package in packages:
            deps = self.check_dependencies(package)
            if isinstance(deps, Err):
                return deps
            if deps.unwrap():
                return Err(
                    CleanerError(
                        ErrorCode.DEPENDENCY,
                        f"Package {package} is required by: {', '.join(deps.unwrap())}",
                    )
                )

        removed = run_checked(self._runner, program, args)
        if isinstance(removed, Err):
            return removed
        return Ok(None)


class AptManager(PackageManager):
    name = "apt"
    tool = "apt-cache"

    @override
    def list_installed(self) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "dpkg-query", ["-W", "-f=${binary:Package}\n"]).map(
            lambda out: split_lines(out.stdout)
        )

    @override
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "apt-cache", ["rdepends", "--installed", package]).map(
            lambda out: _unique(parse_apt_rdepends(out.stdout), exclude=package)
        )

    @override
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]:
        return "apt-get", ["remove", "-y", *packages]


def parse_apt_rdepends(output: str) -> list[str]:
    """Parse ``apt-cache rdepends``: the first line echoes the package name."""
    lines = split_lines(output)
    deps: list[str] = []
    for line in lines[1:]:
        if line.startswith("Reverse Depends"):
            continue
        name = line.lstrip("|").strip()
        if name:
            deps.append(name)
    return deps


def _rpm_whatrequires(runner: CommandRunner, package: str) -> Result[list[str], CleanerError]:
    result = runner.run("rpm", ["-q", "--whatrequires", package])
    if isinstance(result, Err):
        return result
    output = result.unwrap()
    if output.success:
        return Ok(_unique(split_lines(output.stdout), exclude=package))
    # rpm exits non-zero when nothing requires the package.
    if "no package requires" in output.message.lower() or not output.stdout.strip():
        return Ok([])
    return Err(CleanerError(ErrorCode.COMMAND, f"rpm command failed: {output.message}"))


class DnfManager(PackageManager):
    name = "dnf"
    tool = "dnf"

    @override
    def list_installed(self) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "rpm", ["-qa", "--qf", "%{NAME}\n"]).map(lambda out: split_lines(out.stdout))

    @override
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]:
        return _rpm_whatrequires(self._runner, package)

    @override
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]:
        return "dnf", ["remove", "-y", *packages]


class RpmManager(PackageManager):
    name = "rpm"
    tool = "rpm"

    @override
    def list_installed(self) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "rpm", ["-qa", "--qf", "%{NAME}\n"]).map(lambda out: split_lines(out.stdout))

    @override
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]:
        return _rpm_whatrequires(self._runner, package)

    @override
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]:
        return "rpm", ["-e", *packages]


class PacmanManager(PackageManager):
    name = "pacman"
    tool = "pacman"

    @override
    def list_installed(self) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "pacman", ["-Qq"]).map(lambda out: split_lines(out.stdout))

    @override
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "pacman", ["-Qi", package]).map(
            lambda out: _unique(parse_pacman_required_by(out.stdout), exclude=package)
        )

    @override
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]:
        return "pacman", ["-R", "--noconfirm", *packages]


def parse_pacman_required_by(output: str) -> list[str]:
    """Collect the ``Required By`` field of ``pacman -Qi``, including wrapped lines."""
    deps: list[str] = []
    in_field = False
    for raw in output.splitlines():
        if not raw.strip():
            continue
        key, sep, value = raw.partition(":")
        if sep and not raw.startswith(" "):
            in_field = key.strip() == "Required By"
            if not in_field:
                continue
        elif not in_field:
            continue
        else:
            value = raw
        deps.extend(name for name in value.split() if name != "None")
    return deps


class FlatpakManager(PackageManager):
    name = "flatpak"
    tool = "flatpak"

    @override
    def list_installed(self) -> Result[list[str], CleanerError]:
        return run_checked(self._runner, "flatpak", ["list", "--app", "--columns=application"]).map(
            lambda out: split_lines(out.stdout)
        )

    def list_installed_with_sizes(self) -> Result[list[tuple[str, int]], CleanerError]:
        result = run_checked(self._runner, "flatpak", ["list", "--app", "--columns=application,size"])
        if isinstance(result, Err):
            return result
        apps: list[tuple[str, int]] = []
        for line in split_lines(result.unwrap().stdout):
            app, _, size_text = line.partition("\t")
            app = app.strip()
            if app:
                apps.append((app, parse_size(size_text) or 0))
        return Ok(apps)

    @override
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]:
        return Ok([])

    @override
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]:
        return "flatpak", ["uninstall", "-y", *packages]


class SnapManager(PackageManager):
    name = "snap"
    tool = "snap"

    @override
    def list_installed(self) -> Result[list[str], CleanerError]:
        # `snap list` prints a header row: Name Version Rev Tracking Publisher Notes
        return run_checked(self._runner, "snap", ["list"]).map(
            lambda out: [line.split()[0] for line in split_lines(out.stdout)[1:]]
        )

    def list_installed_with_sizes(self, snaps_dir: Path = SNAPS_DIR) -> Result[list[tuple[str, int]], CleanerError]:
        """Installed snaps sized by their ``<name>_<rev>.snap`` image file."""
        result = run_checked(self._runner, "snap", ["list"])
        if isinstance(result, Err):
            return result
        snaps: list[tuple[str, int]] = []
        for line in split_lines(result.unwrap().stdout)[1:]:
            fields = line.split()
            size = 0
            if len(fields) >= 3:
                image = snaps_dir / f"{fields[0]}_{fields[2]}.snap"
                try:
                    size = image.stat().st_size
                except OSError:
                    size = 0
            snaps.append((fields[0], size))
        return Ok(snaps)

    @override
    def check_dependencies(self, package: str) -> Result[list[str], CleanerError]:
        return Ok([])

    @override
    def _removal_command(self, packages: Sequence[str]) -> tuple[str, list[str]]:
        return "snap", ["remove", *packages]


_MANAGERS: dict[str, type[PackageManager]] = {
    cls.name: cls for cls in (AptManager, DnfManager, RpmManager, PacmanManager, FlatpakManager, SnapManager)
}


def create_package_manager(name: str, runner: CommandRunner = DEFAULT_RUNNER) -> PackageManager | None:
    """Return the backend called *name*, or None for an unknown manager."""
    cls = _MANAGERS.get(name)
    return cls(runner) if cls is not None else None
