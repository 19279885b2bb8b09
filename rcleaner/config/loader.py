from __future__ import annotations

import json
from pathlib import Path

from result import Err, Ok, Result

from rcleaner.config.defaults import default_config
from rcleaner.config.schema import AppConfig

CONFIG_PATH = "~/.config/rcleaner/config.json"


def config_path(path: str | Path | None = None) -> Path:
    return Path(path or CONFIG_PATH).expanduser()


def load_config(path: str | Path | None = None) -> Result[AppConfig, str]:
    resolved = config_path(path)
    if not resolved.exists():
        return Ok(default_config())

    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            return Err(f"Config at {resolved} must be a JSON object.")
        return Ok(AppConfig.from_dict(payload, default_config()))
    except Exception as exc:  # noqa: BLE001
        return Err(f"Failed reading config at {resolved}: {exc}.")


def save_config(config: AppConfig, path: str | Path | None = None) -> Result[Path, str]:
    resolved = config_path(path)
    try:
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        return Err(f"Failed writing config at {resolved}: {exc}.")
    return Ok(resolved)


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)
