from __future__ import annotations

import json
from pathlib import Path

from result import Err, Ok

from rcleaner.config.defaults import default_config
from rcleaner.config.loader import load_config, sample_config_json, save_config


def test_load_config_missing_uses_defaults(tmp_path: Path) -> None:
    result = load_config(tmp_path / "missing.json")
    assert isinstance(result, Ok)
    assert result.unwrap() == default_config()


def test_load_config_invalid_returns_warning(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text("not-json", encoding="utf-8")

    result = load_config(p)
    assert isinstance(result, Err)
    assert "failed reading config" in result.unwrap_err().lower()


class TestLoadConfig:
    def test_non_dict_json_returns_err(self, tmp_path: Path) -> None:
        p = tmp_path / "config.json"
        p.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        result = load_config(p)
        assert isinstance(result, Err)
        assert "must be a JSON object" in result.unwrap_err()

    def test_partial_config_keeps_other_defaults(self, tmp_path: Path) -> None:
        p = tmp_path / "config.json"
        p.write_text(json.dumps({"safety": {"level": "aggressive"}}), encoding="utf-8")
        cfg = load_config(p).unwrap()
        assert cfg.safety.level == "aggressive"
        assert cfg.safety.enabled is True
        assert cfg.current_profile().max_backup_size_gb == 5
        assert cfg.rules.blacklist.patterns == ("*.tmp", "*.log")

    def test_save_then_load_round_trip(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "config.json"
        saved = save_config(default_config(), target)
        assert isinstance(saved, Ok)
        assert saved.unwrap() == target
        assert load_config(target).unwrap() == default_config()

    def test_sample_config_json_is_valid(self) -> None:
        parsed = json.loads(sample_config_json())
        assert isinstance(parsed, dict)
        assert parsed["safety"]["onlyRootCanDisable"] is True
        assert parsed["profiles"]["safe"]["maxBackupSizeGb"] == 10
