from __future__ import annotations

from pathlib import Path

from rcleaner.backup.rollback import perform_rollback
from rcleaner.backup.store import BackupStore
from rcleaner.cleaners import CacheCleaner, TempFilesCleaner
from rcleaner.models.enums import CleanupCategory
from rcleaner.safety.checker import SafetyChecker
from rcleaner.safety.dependencies import DependencyOracle
from rcleaner.services.fingerprint import hash_path
from rcleaner.services.orchestrator import DONE_LABEL, Orchestrator
from tests.factories import make_config, write_tree
from tests.fakes import FakeRunner


def build(tmp_path: Path, whitelist: tuple[str, ...] = ()) -> tuple[Orchestrator, BackupStore, Path, Path]:
    home = tmp_path / "home"
    cache = write_tree(home / ".cache" / "pip", {"wheel.whl": b"w" * 100, "http/idx": b"i" * 20})
    trash = write_tree(home / ".local" / "share" / "Trash", {"files/old.iso": b"o" * 50})
    store = BackupStore(tmp_path / "backups", max_size=0)
    runner = FakeRunner()
    config = make_config(whitelist=whitelist, blacklist=(str(tmp_path / "outside"),))
    cleaners = {
        CleanupCategory.CACHE: CacheCleaner(store, runner, home=home, targets=[("Pip cache", cache)]),
        CleanupCategory.TEMP_FILES: TempFilesCleaner(
            store, runner, targets=[("Trash", trash), ("Scratch", tmp_path / "outside")]
        ),
    }
    write_tree(tmp_path / "outside", {"f": b"x"})
    checker = SafetyChecker(config, DependencyOracle(runner), is_root=False, home=str(home))
    return Orchestrator(config, cleaners, checker), store, cache, trash


class TestScanCleanRollback:
    def test_full_cycle_restores_exact_content(self, tmp_path: Path) -> None:
        orchestrator, store, cache, trash = build(tmp_path)
        before = hash_path(cache)

        items = orchestrator.scan_all().unwrap()
        by_name = {item.name: item for item in items}
        assert set(by_name) == {"Pip cache", "Trash", "Scratch"}
        assert by_name["Scratch"].can_clean is False

        for item in items:
            item.selected = True
        reports: list[tuple[float, str]] = []
        result = orchestrator.clean_selected_with_progress(
            items, False, lambda f, label: reports.append((f, label))
        ).unwrap()

        assert result.cleaned_items == 2
        assert result.skipped_items == 1
        assert result.freed_bytes == 170
        assert result.errors == []
        assert reports[-1] == (1.0, DONE_LABEL)
        assert not cache.exists()
        assert list(trash.iterdir()) == []
        assert (tmp_path / "outside" / "f").exists()

        backups = store.list_backups()
        assert len(backups) == 2
        cache_backup = next(b for b in backups if b.items[0].original_path == str(cache))
        report = perform_rollback(store, cache_backup.id, verify=True).unwrap()
        assert report.restored == [str(cache)]
        assert hash_path(cache) == before

    def test_dry_run_changes_nothing(self, tmp_path: Path) -> None:
        orchestrator, store, cache, trash = build(tmp_path)
        items = orchestrator.scan_all().unwrap()
        for item in items:
            item.selected = True

        dry = orchestrator.clean_selected(items, dry_run=True).unwrap()
        assert (dry.cleaned_items, dry.freed_bytes, dry.skipped_items) == (2, 170, 1)
        assert (cache / "wheel.whl").exists()
        assert (trash / "files" / "old.iso").exists()
        assert store.list_backups() == []

    def test_whitelisted_cache_is_left_alone(self, tmp_path: Path) -> None:
        orchestrator, _, cache, _ = build(tmp_path, whitelist=(str(tmp_path / "home" / ".cache"),))
        items = orchestrator.scan_all().unwrap()
        pip = next(item for item in items if item.name == "Pip cache")
        assert pip.can_clean is False

        pip.selected = True
        result = orchestrator.clean_selected([pip], dry_run=False).unwrap()
        assert result.cleaned_items == 0
        assert result.skipped_items == 1
        assert (cache / "wheel.whl").exists()
