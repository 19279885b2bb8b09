from __future__ import annotations

from enum import Enum


class CleanupCategory(str, Enum):
    CACHE = "cache"
    APPLICATIONS = "applications"
    TEMP_FILES = "temp_files"
    LOGS = "logs"
    OLD_PACKAGES = "old_packages"
    OLD_KERNELS = "old_kernels"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class SourceKind(str, Enum):
    FILESYSTEM = "filesystem"
    PACKAGE_MANAGER = "package_manager"
    CONTAINER = "container"


# Classification only: every rule type blocks the same way.
class SafetyRuleType(str, Enum):
    PROTECT_SYSTEM_PACKAGES = "protect_system_packages"
    PROTECT_KERNEL = "protect_kernel"
    PROTECT_BOOTLOADER = "protect_bootloader"
    PROTECT_USER_HOME = "protect_user_home"
    PROTECT_ACTIVE_APPLICATIONS = "protect_active_applications"


class ErrorCode(str, Enum):
    BACKUP = "backup"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    DEPENDENCY = "dependency"
    COMMAND = "command"
    IO = "io"
    PARSE = "parse"
    SERIALIZATION = "serialization"
