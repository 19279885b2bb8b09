from __future__ import annotations

import json
from pathlib import Path

import pytest
from result import Err

from rcleaner.models.enums import CleanupCategory, ErrorCode
from rcleaner.services.scan_cache import CACHE_VERSION, cache_path, load_cached_items, save_cached_items
from tests.factories import make_item, make_package


def test_saved_items_load_back(tmp_path: Path) -> None:
    blocked = make_item("/var/log", 10, category=CleanupCategory.LOGS)
    blocked.mark_blocked("Insufficient permissions to clean path")
    package = make_package("libold")
    package.dependencies = ["app"]
    target = tmp_path / "nested" / "scan.json"

    assert save_cached_items([blocked, package], target).unwrap() == target
    assert load_cached_items(target).unwrap() == [blocked, package]


def test_missing_cache_is_none(tmp_path: Path) -> None:
    assert load_cached_items(tmp_path / "none.json").unwrap() is None


def test_other_version_is_ignored(tmp_path: Path) -> None:
    target = tmp_path / "scan.json"
    target.write_text(json.dumps({"version": CACHE_VERSION + 1, "items": []}), encoding="utf-8")
    assert load_cached_items(target).unwrap() is None


@pytest.mark.parametrize(
    "content",
    ["{broken", json.dumps({"version": CACHE_VERSION, "items": [{"id": "x"}]})],
)
def test_invalid_cache_is_parse_error(tmp_path: Path, content: str) -> None:
    target = tmp_path / "scan.json"
    target.write_text(content, encoding="utf-8")
    result = load_cached_items(target)
    assert isinstance(result, Err)
    assert result.unwrap_err().code is ErrorCode.PARSE


def test_default_location_follows_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    assert cache_path() == tmp_path / "rcleaner" / "scan_cache.json"
