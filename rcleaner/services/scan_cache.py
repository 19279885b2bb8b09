from __future__ import annotations

import json
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from result import Err, Ok, Result

from rcleaner.models.cleanup import CleanupItem
from rcleaner.models.enums import ErrorCode
from rcleaner.models.errors import CleanerError

CACHE_VERSION = 1
CACHE_FILE = "scan_cache.json"


def cache_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()
    base = os.environ.get("XDG_CACHE_HOME") or "~/.cache"
    return Path(base).expanduser() / "rcleaner" / CACHE_FILE


def save_cached_items(items: Sequence[CleanupItem], path: str | Path | None = None) -> Result[Path, CleanerError]:
    resolved = cache_path(path)
    payload: dict[str, Any] = {
        "version": CACHE_VERSION,
        "createdAt": datetime.now(UTC).isoformat(),
        "items": [item.to_dict() for item in items],
    }
    try:
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        return Err(CleanerError.from_os_error(exc))
    return Ok(resolved)


def load_cached_items(path: str | Path | None = None) -> Result[list[CleanupItem] | None, CleanerError]:
    """Items from the last saved scan.

    ``Ok(None)`` when there is no cache or it was written by another cache
    version; ``Err(PARSE)`` when the file is unreadable as a cache.
    """
    resolved = cache_path(path)
    if not resolved.exists():
        return Ok(None)
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except OSError as exc:
        return Err(CleanerError.from_os_error(exc))
    except ValueError as exc:
        return Err(CleanerError(ErrorCode.PARSE, f"Invalid scan cache at {resolved}: {exc}"))

    if not isinstance(payload, dict) or payload.get("version") != CACHE_VERSION:
        return Ok(None)
    try:
        return Ok([CleanupItem.from_dict(raw) for raw in payload.get("items", [])])
    except (KeyError, TypeError, ValueError) as exc:
        return Err(CleanerError(ErrorCode.PARSE, f"Invalid scan cache entry in {resolved}: {exc}"))
