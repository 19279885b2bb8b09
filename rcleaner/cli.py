from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from result import Err
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.prompt import Confirm

from rcleaner.backup.rollback import perform_rollback
from rcleaner.backup.store import BackupStore
from rcleaner.config.loader import config_path, load_config, sample_config_json, save_config
from rcleaner.config.schema import AppConfig
from rcleaner.models.cleanup import CleanupItem
from rcleaner.models.enums import CleanupCategory
from rcleaner.services.background import ScanTask
from rcleaner.services.orchestrator import Orchestrator
from rcleaner.services.scan_cache import load_cached_items, save_cached_items
from rcleaner.ui.views import render_backups, render_result, render_rollback, render_scan

logger = logging.getLogger("rcleaner")

_CATEGORY_CHOICES = [category.value for category in CleanupCategory]


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rcleaner", description="Reclaim disk space safely, with rollback.")
    parser.add_argument("--config", help="Path to config.json (default: ~/.config/rcleaner/config.json)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="List cleanup candidates")
    scan.add_argument("--category", "-c", action="append", choices=_CATEGORY_CHOICES, help="Limit to category")
    scan.add_argument("--cached", action="store_true", help="Show the last saved scan instead of rescanning")

    clean = subparsers.add_parser("clean", help="Clean candidates, backing them up first")
    clean.add_argument("--category", "-c", action="append", choices=_CATEGORY_CHOICES, help="Limit to category")
    clean.add_argument("--dry-run", action="store_true", help="Report what would be cleaned without changes")
    clean.add_argument("--include-blocked", action="store_true", help="Also select blocked items (they are skipped)")
    clean.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    backups = subparsers.add_parser("backups", help="Manage backup generations")
    backup_subs = backups.add_subparsers(dest="backups_action", required=True)
    backup_subs.add_parser("list", help="List backups, oldest first")
    delete = backup_subs.add_parser("delete", help="Delete a backup")
    delete.add_argument("backup_id")

    rollback = subparsers.add_parser("rollback", help="Restore a backup onto its original paths")
    rollback.add_argument("backup_id")
    rollback.add_argument("--verify", action="store_true", help="Check stored checksums before restoring")

    config = subparsers.add_parser("config", help="Configuration helpers")
    config_subs = config.add_subparsers(dest="config_action", required=True)
    config_subs.add_parser("sample", help="Print the default configuration")
    config_subs.add_parser("init", help="Write the default configuration if none exists")
    return parser


def _filter_categories(items: list[CleanupItem], categories: Sequence[str] | None) -> list[CleanupItem]:
    if not categories:
        return items
    wanted = {CleanupCategory(value) for value in categories}
    return [item for item in items if item.category in wanted]


def _scan(console: Console, orchestrator: Orchestrator) -> list[CleanupItem]:
    task = ScanTask(orchestrator.scan_all)
    with console.status("Scanning..."):
        scanned = task.wait()
    if scanned is None:
        console.print("[red]Scan failed:[/red] the scan produced no result")
        return []
    if isinstance(scanned, Err):
        console.print(f"[red]Scan failed:[/red] {scanned.unwrap_err()}")
        return []
    items = scanned.unwrap()
    saved = save_cached_items(items)
    if isinstance(saved, Err):
        logger.warning("Could not save scan cache: %s", saved.unwrap_err())
    return items


def run_scan(args: argparse.Namespace, console: Console, config: AppConfig) -> int:
    if args.cached:
        cached = load_cached_items()
        if isinstance(cached, Err):
            console.print(f"[red]{cached.unwrap_err()}[/red]")
            return 1
        items = cached.unwrap()
        if items is None:
            console.print("No cached scan; run [bold]rcleaner scan[/bold] first.")
            return 1
    else:
        items = _scan(console, Orchestrator(config))
    render_scan(console, _filter_categories(items, args.category))
    return 0


def run_clean(args: argparse.Namespace, console: Console, config: AppConfig) -> int:
    orchestrator = Orchestrator(config)
    items = _filter_categories(_scan(console, orchestrator), args.category)
    for item in items:
        item.selected = item.can_clean or args.include_blocked
    selected = [item for item in items if item.selected]
    if not selected:
        console.print("Nothing to clean.")
        return 0

    render_scan(console, selected)
    confirm_needed = not (args.dry_run or args.yes or config.current_profile().auto_confirm)
    if confirm_needed and not Confirm.ask(f"Clean {len(selected)} items?", console=console):
        console.print("Aborted.")
        return 1

    with Progress(
        TextColumn("{task.description}"), BarColumn(), TaskProgressColumn(), console=console
    ) as progress:
        task = progress.add_task("Starting", total=1.0)

        def on_progress(fraction: float, label: str) -> None:
            progress.update(task, completed=fraction, description=label)

        cleaned = orchestrator.clean_selected_with_progress(selected, args.dry_run, on_progress)
    if isinstance(cleaned, Err):
        console.print(f"[red]Clean failed:[/red] {cleaned.unwrap_err()}")
        return 1
    result = cleaned.unwrap()
    render_result(console, result, args.dry_run)
    return 1 if result.errors else 0


def run_backups(args: argparse.Namespace, console: Console, config: AppConfig) -> int:
    store = BackupStore.from_config(config)
    if args.backups_action == "list":
        render_backups(console, store.list_backups())
        return 0
    deleted = store.delete_backup(args.backup_id)
    if isinstance(deleted, Err):
        console.print(f"[red]{deleted.unwrap_err()}[/red]")
        return 1
    console.print(f"Deleted {args.backup_id}")
    return 0


def run_rollback(args: argparse.Namespace, console: Console, config: AppConfig) -> int:
    restored = perform_rollback(BackupStore.from_config(config), args.backup_id, verify=args.verify)
    if isinstance(restored, Err):
        console.print(f"[red]Rollback failed:[/red] {restored.unwrap_err()}")
        return 1
    render_rollback(console, restored.unwrap())
    return 0


def run_config(args: argparse.Namespace, console: Console, config: AppConfig) -> int:
    if args.config_action == "sample":
        console.print_json(sample_config_json())
        return 0
    target = config_path(args.config)
    if target.exists():
        console.print(f"Config already exists at {target}")
        return 0
    saved = save_config(config, target)
    if isinstance(saved, Err):
        console.print(f"[red]{saved.unwrap_err()}[/red]")
        return 1
    console.print(f"Wrote {saved.unwrap()}")
    return 0


_COMMANDS = {
    "scan": run_scan,
    "clean": run_clean,
    "backups": run_backups,
    "rollback": run_rollback,
    "config": run_config,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    console = Console()

    loaded = load_config(args.config)
    if isinstance(loaded, Err):
        console.print(f"[red]{loaded.unwrap_err()}[/red]")
        return 1
    return _COMMANDS[args.command](args, console, loaded.unwrap())


if __name__ == "__main__":
    sys.exit(main())
