from __future__ import annotations

import shutil
from pathlib import Path

from result import Err, Ok

from rcleaner.backup.rollback import perform_rollback, verify_backup_items
from rcleaner.backup.store import BackupStore
from rcleaner.models.enums import ErrorCode
from tests.factories import make_item, write_tree


def backed_up_tree(tmp_path: Path) -> tuple[BackupStore, Path, str]:
    root = write_tree(tmp_path / "data", {"a.txt": b"alpha", "sub/b.txt": b"beta"})
    store = BackupStore(tmp_path / "backups")
    backup = store.create_backup([make_item(root)]).unwrap()
    assert backup is not None
    return store, root, backup.id


class TestPerformRollback:
    def test_restores_deleted_directory(self, tmp_path: Path) -> None:
        store, root, backup_id = backed_up_tree(tmp_path)
        shutil.rmtree(root)

        report = perform_rollback(store, backup_id).unwrap()
        assert report.restored == [str(root)]
        assert (root / "a.txt").read_bytes() == b"alpha"
        assert (root / "sub" / "b.txt").read_bytes() == b"beta"

    def test_restores_single_file_recreating_parents(self, tmp_path: Path) -> None:
        src = tmp_path / "deep" / "dir" / "f.bin"
        src.parent.mkdir(parents=True)
        src.write_bytes(b"payload")
        store = BackupStore(tmp_path / "backups")
        backup = store.create_backup([make_item(src)]).unwrap()
        assert backup is not None
        shutil.rmtree(tmp_path / "deep")

        assert isinstance(perform_rollback(store, backup.id), Ok)
        assert src.read_bytes() == b"payload"

    def test_missing_backup_copy_is_skipped(self, tmp_path: Path) -> None:
        store, root, backup_id = backed_up_tree(tmp_path)
        backup = store.load_backup(backup_id).unwrap()
        shutil.rmtree(backup.items[0].backup_path)

        report = perform_rollback(store, backup_id).unwrap()
        assert report.restored == []
        assert report.skipped == [str(root)]

    def test_unknown_backup_is_not_found(self, tmp_path: Path) -> None:
        result = perform_rollback(BackupStore(tmp_path / "backups"), "nope")
        assert isinstance(result, Err)
        assert result.unwrap_err().code is ErrorCode.NOT_FOUND

    def test_tampered_copy_restores_without_verify(self, tmp_path: Path) -> None:
        store, root, backup_id = backed_up_tree(tmp_path)
        backup = store.load_backup(backup_id).unwrap()
        (Path(backup.items[0].backup_path) / "a.txt").write_bytes(b"tampered")
        shutil.rmtree(root)

        assert isinstance(perform_rollback(store, backup_id), Ok)
        assert (root / "a.txt").read_bytes() == b"tampered"


class TestVerify:
    def test_verify_passes_for_intact_backup(self, tmp_path: Path) -> None:
        store, root, backup_id = backed_up_tree(tmp_path)
        shutil.rmtree(root)
        assert isinstance(perform_rollback(store, backup_id, verify=True), Ok)
        assert (root / "a.txt").exists()

    def test_verify_mismatch_writes_nothing(self, tmp_path: Path) -> None:
        store, root, backup_id = backed_up_tree(tmp_path)
        backup = store.load_backup(backup_id).unwrap()
        (Path(backup.items[0].backup_path) / "a.txt").write_bytes(b"tampered")
        shutil.rmtree(root)

        result = perform_rollback(store, backup_id, verify=True)
        assert isinstance(result, Err)
        assert result.unwrap_err().code is ErrorCode.BACKUP
        assert not root.exists()

    def test_verify_ignores_missing_copies(self, tmp_path: Path) -> None:
        store, _, backup_id = backed_up_tree(tmp_path)
        backup = store.load_backup(backup_id).unwrap()
        shutil.rmtree(backup.items[0].backup_path)
        assert isinstance(verify_backup_items(backup.items), Ok)
