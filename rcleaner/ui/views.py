from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from rcleaner.backup.rollback import RollbackReport
from rcleaner.cleaners import CATEGORY_ORDER
from rcleaner.models.backup import Backup
from rcleaner.models.cleanup import CleanupItem, CleanupResult
from rcleaner.models.enums import CleanupCategory
from rcleaner.services.formatting import format_bytes, format_percentage


@dataclass(slots=True)
class ItemRow:
    id: str
    name: str
    category: str
    size_bytes: int
    status: str


def item_status(item: CleanupItem) -> str:
    if item.can_clean:
        return "ok"
    return f"blocked: {item.blocked_reason or 'unknown'}"


def item_rows(items: Sequence[CleanupItem]) -> list[ItemRow]:
    """Rows in category order, largest first within a category."""
    rank = {category: index for index, category in enumerate(CATEGORY_ORDER)}
    ordered = sorted(items, key=lambda item: (rank.get(item.category, len(rank)), -item.size))
    return [
        ItemRow(
            id=item.id,
            name=item.name,
            category=item.category.label,
            size_bytes=item.size,
            status=item_status(item),
        )
        for item in ordered
    ]


def category_totals(items: Sequence[CleanupItem]) -> dict[CleanupCategory, tuple[int, int]]:
    """(count, bytes) of cleanable items per category."""
    totals: dict[CleanupCategory, tuple[int, int]] = {}
    for item in items:
        if not item.can_clean:
            continue
        count, size = totals.get(item.category, (0, 0))
        totals[item.category] = (count + 1, size + item.size)
    return totals


def render_scan(console: Console, items: Sequence[CleanupItem]) -> None:
    table = Table(title="Cleanup Candidates", header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    for row in item_rows(items):
        style = None if row.status == "ok" else "dim"
        table.add_row(row.id, row.name, row.category, format_bytes(row.size_bytes), row.status, style=style)
    console.print(table)

    totals = category_totals(items)
    grand_total = sum(size for _, size in totals.values())
    cat_table = Table(title="Reclaimable by Category", header_style="bold magenta")
    cat_table.add_column("Category")
    cat_table.add_column("Items", justify="right")
    cat_table.add_column("Size", justify="right")
    cat_table.add_column("Share", justify="right")
    for category in CATEGORY_ORDER:
        if category not in totals:
            continue
        count, size = totals[category]
        cat_table.add_row(category.label, str(count), format_bytes(size), format_percentage(size, grand_total))
    console.print(cat_table)


def render_result(console: Console, result: CleanupResult, dry_run: bool) -> None:
    title = "Dry Run Summary" if dry_run else "Cleanup Summary"
    verb = "Would free" if dry_run else "Freed"
    body = (
        f"Cleaned: [bold]{result.cleaned_items}[/bold]\n"
        f"Skipped: [bold]{result.skipped_items}[/bold]\n"
        f"{verb}: [bold]{format_bytes(result.freed_bytes)}[/bold]\n"
        f"Errors: [bold]{len(result.errors)}[/bold]"
    )
    console.print(Panel(body, title=title, border_style="red" if result.errors else "blue"))
    for error in result.errors:
        console.print(f"[red]•[/red] {error}")


def render_backups(console: Console, backups: Sequence[Backup]) -> None:
    if not backups:
        console.print("No backups.")
        return
    table = Table(title="Backups", header_style="bold yellow")
    table.add_column("ID")
    table.add_column("Created (UTC)")
    table.add_column("Items", justify="right")
    table.add_column("Size", justify="right")
    for backup in backups:
        table.add_row(
            backup.id,
            backup.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            str(len(backup.items)),
            format_bytes(backup.size),
        )
    console.print(table)


def render_rollback(console: Console, report: RollbackReport) -> None:
    body = f"Restored: [bold]{len(report.restored)}[/bold]\nSkipped: [bold]{len(report.skipped)}[/bold]"
    console.print(Panel(body, title=f"Rollback {report.backup_id}", border_style="green"))
    for path in report.skipped:
        console.print(f"[yellow]missing backup copy[/yellow] {path}")
