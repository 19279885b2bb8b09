from __future__ import annotations

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners._base import Cleaner, CleanerBase, remove_contents, remove_path
from rcleaner.cleaners.applications import ApplicationsCleaner
from rcleaner.cleaners.cache import CacheCleaner
from rcleaner.cleaners.logs import LogsCleaner
from rcleaner.cleaners.old_kernels import OldKernelsCleaner
from rcleaner.cleaners.old_packages import OldPackagesCleaner
from rcleaner.cleaners.temp_files import TempFilesCleaner
from rcleaner.config.schema import AppConfig
from rcleaner.models.enums import CleanupCategory
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner

# Groups are cleaned in this order.
CATEGORY_ORDER: tuple[CleanupCategory, ...] = (
    CleanupCategory.CACHE,
    CleanupCategory.APPLICATIONS,
    CleanupCategory.TEMP_FILES,
    CleanupCategory.LOGS,
    CleanupCategory.OLD_PACKAGES,
    CleanupCategory.OLD_KERNELS,
)


def create_cleaner(
    category: CleanupCategory,
    config: AppConfig,
    store: BackupStore,
    runner: CommandRunner = DEFAULT_RUNNER,
) -> CleanerBase:
    """Create the cleaner responsible for *category*.

    Raises ``ValueError`` for a category without a cleaner.
    """
    if category is CleanupCategory.CACHE:
        return CacheCleaner(store, runner)
    if category is CleanupCategory.APPLICATIONS:
        return ApplicationsCleaner(store, runner)
    if category is CleanupCategory.TEMP_FILES:
        return TempFilesCleaner(store, runner)
    if category is CleanupCategory.LOGS:
        return LogsCleaner(store, runner)
    if category is CleanupCategory.OLD_PACKAGES:
        return OldPackagesCleaner(store, runner)
    if category is CleanupCategory.OLD_KERNELS:
        return OldKernelsCleaner(store, runner, keep=config.current_profile().keep_recent_kernels)
    msg = f"No cleaner for category: {category}"
    raise ValueError(msg)


def default_cleaners(
    config: AppConfig,
    store: BackupStore,
    runner: CommandRunner = DEFAULT_RUNNER,
) -> dict[CleanupCategory, CleanerBase]:
    """One cleaner per category, keyed and ordered by ``CATEGORY_ORDER``."""
    return {category: create_cleaner(category, config, store, runner) for category in CATEGORY_ORDER}


__all__ = [
    "CATEGORY_ORDER",
    "ApplicationsCleaner",
    "CacheCleaner",
    "Cleaner",
    "CleanerBase",
    "LogsCleaner",
    "OldKernelsCleaner",
    "OldPackagesCleaner",
    "TempFilesCleaner",
    "create_cleaner",
    "default_cleaners",
    "remove_contents",
    "remove_path",
]
