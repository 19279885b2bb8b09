from __future__ import annotations

from rich.console import Console

from rcleaner.backup.rollback import RollbackReport
from rcleaner.models.cleanup import CleanupItem, CleanupResult
from rcleaner.models.enums import CleanupCategory
from rcleaner.ui.views import category_totals, item_rows, render_backups, render_result, render_rollback, render_scan
from tests.factories import make_backup, make_item


def _console() -> Console:
    return Console(record=True, width=160, color_system=None)


def _items() -> list[CleanupItem]:
    blocked = make_item("/var/log", 500, category=CleanupCategory.LOGS)
    blocked.mark_blocked("Insufficient permissions to clean path")
    return [
        blocked,
        make_item("/tmp/small", 10, category=CleanupCategory.TEMP_FILES),
        make_item("/home/a/.cache/big", 2048),
        make_item("/home/a/.cache/tiny", 1),
    ]


def test_rows_in_category_order_then_size() -> None:
    rows = item_rows(_items())
    assert [row.id for row in rows] == ["/home/a/.cache/big", "/home/a/.cache/tiny", "/tmp/small", "/var/log"]
    assert rows[0].category == "Cache"
    assert rows[-1].status == "blocked: Insufficient permissions to clean path"


def test_totals_skip_blocked_items() -> None:
    assert category_totals(_items()) == {
        CleanupCategory.CACHE: (2, 2049),
        CleanupCategory.TEMP_FILES: (1, 10),
    }


def test_render_scan() -> None:
    console = _console()
    render_scan(console, _items())
    text = console.export_text()
    assert "Cleanup Candidates" in text
    assert "Reclaimable by Category" in text
    assert "Temp Files" in text


def test_render_result_mentions_errors() -> None:
    console = _console()
    render_result(console, CleanupResult(cleaned_items=2, freed_bytes=1024, errors=["Cache: disk full"]), dry_run=True)
    text = console.export_text()
    assert "Dry Run Summary" in text
    assert "Would free: 1.00 KB" in text
    assert "Cache: disk full" in text


def test_render_backups() -> None:
    console = _console()
    render_backups(console, [])
    assert "No backups." in console.export_text()

    render_backups(console, [make_backup("backup-1", 2048, minute=5)])
    text = console.export_text()
    assert "backup-1" in text
    assert "2024-01-01 12:05:00" in text


def test_render_rollback_lists_missing_copies() -> None:
    console = _console()
    render_rollback(console, RollbackReport("backup-1", restored=["/a"], skipped=["/b"]))
    text = console.export_text()
    assert "Rollback backup-1" in text
    assert "/b" in text
