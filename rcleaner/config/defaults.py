from __future__ import annotations

from rcleaner.config.schema import (
    AppConfig,
    BlacklistConfig,
    ProfileConfig,
    ProfilesConfig,
    RulesConfig,
    SafetyConfig,
    WhitelistConfig,
)


def default_config() -> AppConfig:
    return AppConfig(
        safety=SafetyConfig(enabled=True, only_root_can_disable=True, level="safe"),
        profiles=ProfilesConfig(
            safe=ProfileConfig(
                auto_confirm=False,
                keep_recent_kernels=2,
                keep_recent_deployments=2,
                max_backup_size_gb=10,
            ),
            aggressive=ProfileConfig(
                auto_confirm=True,
                keep_recent_kernels=1,
                keep_recent_deployments=1,
                max_backup_size_gb=5,
            ),
        ),
        rules=RulesConfig(
            whitelist=WhitelistConfig(paths=("~/.config", "~/Documents", "~/Projects")),
            blacklist=BlacklistConfig(patterns=("*.tmp", "*.log")),
        ),
    )
