from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

GIB = 1024 * 1024 * 1024

AGGRESSIVE_LEVEL = "aggressive"

# (json_key, attr_name, minimum) for the integer profile fields.
_PROFILE_INT_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("keepRecentKernels", "keep_recent_kernels", 0),
    ("keepRecentDeployments", "keep_recent_deployments", 0),
    ("maxBackupSizeGb", "max_backup_size_gb", 0),
)


def _get_int(data: dict[str, Any], json_key: str, default: int, minimum: int) -> int:
    return max(minimum, int(data.get(json_key, default)))


def _get_strings(data: dict[str, Any], json_key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = data.get(json_key)
    if raw is None:
        return default
    return tuple(str(x) for x in raw)


@dataclass(slots=True, frozen=True)
class SafetyConfig:
    enabled: bool = True
    only_root_can_disable: bool = True
    level: str = "safe"

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "onlyRootCanDisable": self.only_root_can_disable,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: SafetyConfig) -> SafetyConfig:
        return cls(
            enabled=bool(data.get("enabled", defaults.enabled)),
            only_root_can_disable=bool(data.get("onlyRootCanDisable", defaults.only_root_can_disable)),
            level=str(data.get("level", defaults.level)),
        )


@dataclass(slots=True, frozen=True)
class ProfileConfig:
    auto_confirm: bool = False
    keep_recent_kernels: int = 2
    keep_recent_deployments: int = 2
    # 0 disables the backup budget entirely.
    max_backup_size_gb: int = 10

    @property
    def max_backup_size_bytes(self) -> int:
        return self.max_backup_size_gb * GIB

    def to_dict(self) -> dict[str, Any]:
        return {
            "autoConfirm": self.auto_confirm,
            "keepRecentKernels": self.keep_recent_kernels,
            "keepRecentDeployments": self.keep_recent_deployments,
            "maxBackupSizeGb": self.max_backup_size_gb,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: ProfileConfig) -> ProfileConfig:
        int_kwargs: dict[str, int] = {}
        for json_key, attr, minimum in _PROFILE_INT_FIELDS:
            int_kwargs[attr] = _get_int(data, json_key, getattr(defaults, attr), minimum)
        return cls(auto_confirm=bool(data.get("autoConfirm", defaults.auto_confirm)), **int_kwargs)


@dataclass(slots=True, frozen=True)
class ProfilesConfig:
    safe: ProfileConfig = field(default_factory=ProfileConfig)
    aggressive: ProfileConfig = field(default_factory=ProfileConfig)

    def to_dict(self) -> dict[str, Any]:
        return {"safe": self.safe.to_dict(), "aggressive": self.aggressive.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: ProfilesConfig) -> ProfilesConfig:
        return cls(
            safe=ProfileConfig.from_dict(data.get("safe", {}), defaults.safe),
            aggressive=ProfileConfig.from_dict(data.get("aggressive", {}), defaults.aggressive),
        )


@dataclass(slots=True, frozen=True)
class WhitelistConfig:
    paths: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class BlacklistConfig:
    patterns: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class RulesConfig:
    whitelist: WhitelistConfig = field(default_factory=WhitelistConfig)
    blacklist: BlacklistConfig = field(default_factory=BlacklistConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "whitelist": {"paths": list(self.whitelist.paths)},
            "blacklist": {"patterns": list(self.blacklist.patterns)},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: RulesConfig) -> RulesConfig:
        return cls(
            whitelist=WhitelistConfig(_get_strings(data.get("whitelist", {}), "paths", defaults.whitelist.paths)),
            blacklist=BlacklistConfig(
                _get_strings(data.get("blacklist", {}), "patterns", defaults.blacklist.patterns)
            ),
        )


@dataclass(slots=True, frozen=True)
class AppConfig:
    """Immutable configuration snapshot.

    Reloading produces a new instance; nothing mutates a loaded snapshot.
    """

    safety: SafetyConfig = field(default_factory=SafetyConfig)
    profiles: ProfilesConfig = field(default_factory=ProfilesConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)

    def current_profile(self) -> ProfileConfig:
        if self.safety.level.lower() == AGGRESSIVE_LEVEL:
            return self.profiles.aggressive
        return self.profiles.safe

    def to_dict(self) -> dict[str, Any]:
        return {
            "safety": self.safety.to_dict(),
            "profiles": self.profiles.to_dict(),
            "rules": self.rules.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: AppConfig) -> AppConfig:
        return cls(
            safety=SafetyConfig.from_dict(data.get("safety", {}), defaults.safety),
            profiles=ProfilesConfig.from_dict(data.get("profiles", {}), defaults.profiles),
            rules=RulesConfig.from_dict(data.get("rules", {}), defaults.rules),
        )
