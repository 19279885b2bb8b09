from __future__ import annotations

from rcleaner.config.defaults import default_config
from rcleaner.config.schema import GIB, AppConfig, ProfileConfig


class TestProfileConfig:
    def test_negative_ints_are_clamped(self) -> None:
        profile = ProfileConfig.from_dict({"keepRecentKernels": -3, "maxBackupSizeGb": -1}, ProfileConfig())
        assert profile.keep_recent_kernels == 0
        assert profile.max_backup_size_gb == 0

    def test_budget_in_bytes(self) -> None:
        assert ProfileConfig(max_backup_size_gb=3).max_backup_size_bytes == 3 * GIB
        assert ProfileConfig(max_backup_size_gb=0).max_backup_size_bytes == 0


class TestAppConfig:
    def test_round_trip(self) -> None:
        cfg = default_config()
        assert AppConfig.from_dict(cfg.to_dict(), AppConfig()) == cfg

    def test_current_profile_follows_level(self) -> None:
        cfg = default_config()
        assert cfg.current_profile() == cfg.profiles.safe
        aggressive = AppConfig.from_dict({"safety": {"level": "Aggressive"}}, cfg)
        assert aggressive.current_profile() == cfg.profiles.aggressive

    def test_rule_lists_are_tuples(self) -> None:
        cfg = AppConfig.from_dict({"rules": {"whitelist": {"paths": ["/srv"]}}}, default_config())
        assert cfg.rules.whitelist.paths == ("/srv",)
        assert cfg.rules.blacklist.patterns == ("*.tmp", "*.log")
