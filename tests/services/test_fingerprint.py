from __future__ import annotations

import hashlib
from pathlib import Path

from rcleaner.services.fingerprint import estimate_total_size, hash_path, path_size
from tests.factories import write_tree

TREE = {"a.txt": b"alpha", "sub/b.bin": b"\x00\x01\x02", "sub/deeper/c": b"gamma"}


class TestHashPath:
    def test_file_hash_is_sha256_of_bytes(self, tmp_path: Path) -> None:
        f = tmp_path / "x"
        f.write_bytes(b"hello")
        assert hash_path(f) == hashlib.sha256(b"hello").hexdigest()

    def test_invariant_under_root_rename(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "one", TREE)
        before = hash_path(root)
        renamed = root.rename(tmp_path / "two")
        assert hash_path(renamed) == before

    def test_same_content_elsewhere_matches(self, tmp_path: Path) -> None:
        assert hash_path(write_tree(tmp_path / "a", TREE)) == hash_path(write_tree(tmp_path / "b", TREE))

    def test_changes_when_file_bytes_change(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", TREE)
        before = hash_path(root)
        (root / "sub" / "b.bin").write_bytes(b"\x00\x01\x03")
        assert hash_path(root) != before

    def test_changes_when_file_added(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", TREE)
        before = hash_path(root)
        (root / "new").write_bytes(b"")
        assert hash_path(root) != before

    def test_changes_when_file_removed(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", TREE)
        before = hash_path(root)
        (root / "a.txt").unlink()
        assert hash_path(root) != before

    def test_changes_when_file_renamed(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", TREE)
        before = hash_path(root)
        (root / "a.txt").rename(root / "z.txt")
        assert hash_path(root) != before


class TestSizes:
    def test_directory_size_sums_files(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", TREE)
        assert path_size(root) == 5 + 3 + 5

    def test_missing_path_is_zero(self, tmp_path: Path) -> None:
        assert path_size(tmp_path / "missing") == 0

    def test_estimate_total(self, tmp_path: Path) -> None:
        root = write_tree(tmp_path / "t", TREE)
        assert estimate_total_size([root / "a.txt", root / "sub"]) == 5 + 3 + 5
