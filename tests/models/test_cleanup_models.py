from __future__ import annotations

from datetime import UTC, datetime

from rcleaner.models.backup import Backup, BackupItem
from rcleaner.models.cleanup import CleanupItem, CleanupResult, CleanupSource
from rcleaner.models.enums import CleanupCategory, ErrorCode, SourceKind
from rcleaner.models.errors import CleanerError
from tests.factories import make_item, make_package


class TestCleanupResultMerge:
    def test_merge_is_associative(self) -> None:
        a = CleanupResult(cleaned_items=1, freed_bytes=10, skipped_items=0, errors=["a"])
        b = CleanupResult(cleaned_items=2, freed_bytes=20, skipped_items=1, errors=["b"])
        c = CleanupResult(cleaned_items=3, freed_bytes=30, skipped_items=2, errors=["c"])

        left = CleanupResult.combine([a, b]).merge(c)
        right = a.merge(CleanupResult.combine([b, c]))
        assert left == right
        assert left.cleaned_items == 6
        assert left.freed_bytes == 60
        assert left.skipped_items == 3

    def test_merge_counts_are_commutative(self) -> None:
        a = CleanupResult(cleaned_items=1, freed_bytes=5, skipped_items=2)
        b = CleanupResult(cleaned_items=4, freed_bytes=7, skipped_items=0)
        ab, ba = a + b, b + a
        assert (ab.cleaned_items, ab.freed_bytes, ab.skipped_items) == (
            ba.cleaned_items,
            ba.freed_bytes,
            ba.skipped_items,
        )

    def test_merge_does_not_mutate_operands(self) -> None:
        a = CleanupResult(cleaned_items=1, errors=["x"])
        b = CleanupResult(cleaned_items=1, errors=["y"])
        merged = a.merge(b)
        merged.errors.append("z")
        assert a.errors == ["x"]
        assert b.errors == ["y"]

    def test_record_cleaned(self) -> None:
        result = CleanupResult()
        result.record_cleaned(100)
        result.record_cleaned(0)
        assert result.cleaned_items == 2
        assert result.freed_bytes == 100


class TestCleanupItem:
    def test_first_blocked_reason_wins(self) -> None:
        item = make_item("/tmp/x")
        item.mark_blocked("first")
        item.mark_blocked("second")
        assert item.can_clean is False
        assert item.blocked_reason == "first"

    def test_dict_round_trip(self) -> None:
        item = make_package("libfoo")
        item.dependencies = ["bar"]
        item.mark_blocked("Package has dependents")
        restored = CleanupItem.from_dict(item.to_dict())
        assert restored == item
        assert restored.source.kind is SourceKind.PACKAGE_MANAGER

    def test_to_dict_uses_camel_case(self) -> None:
        payload = make_item("/tmp/x", 3).to_dict()
        assert payload["canClean"] is True
        assert payload["blockedReason"] is None
        assert payload["category"] == "cache"


def test_source_constructors() -> None:
    assert CleanupSource.filesystem().kind is SourceKind.FILESYSTEM
    assert CleanupSource.package_manager("apt").is_package
    assert not CleanupSource.container("docker").is_package


def test_category_label() -> None:
    assert CleanupCategory.OLD_KERNELS.label == "Old Kernels"
    assert CleanupCategory.TEMP_FILES.label == "Temp Files"


def test_backup_metadata_schema() -> None:
    backup = Backup(
        id="backup-1",
        timestamp=datetime(2024, 5, 1, 8, 30, tzinfo=UTC),
        items=(BackupItem("/tmp/x", "/b/tmp/x", 4, "ab"),),
        size=4,
    )
    payload = backup.to_dict()
    assert set(payload) == {"id", "timestamp", "items", "size"}
    assert set(payload["items"][0]) == {"original_path", "backup_path", "size", "checksum"}
    assert Backup.from_dict(payload) == backup


def test_naive_timestamp_is_read_as_utc() -> None:
    payload = {"id": "b", "timestamp": "2024-05-01T08:30:00", "items": [], "size": 0}
    assert Backup.from_dict(payload).timestamp.tzinfo is UTC


class TestCleanerError:
    def test_str_is_message(self) -> None:
        assert str(CleanerError(ErrorCode.BACKUP, "full")) == "full"

    def test_from_os_error_refines_io(self) -> None:
        assert CleanerError.from_os_error(FileNotFoundError("gone")).code is ErrorCode.NOT_FOUND
        assert CleanerError.from_os_error(PermissionError("no")).code is ErrorCode.PERMISSION
        assert CleanerError.from_os_error(OSError("disk")).code is ErrorCode.IO

    def test_from_os_error_keeps_explicit_code(self) -> None:
        err = CleanerError.from_os_error(FileNotFoundError("gone"), ErrorCode.BACKUP)
        assert err.code is ErrorCode.BACKUP
