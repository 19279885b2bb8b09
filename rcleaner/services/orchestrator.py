# Scan-all / clean-selected pipeline.
#
# scan_all:
#   every cleaner scans in CATEGORY_ORDER; a failing cleaner is logged and
#   contributes nothing.  The safety checker then stamps every item; a
#   checker error blocks that item instead of aborting the scan.
#
# clean_selected_with_progress:
#   selected items are grouped by category.  Each non-empty group, in
#   CATEGORY_ORDER, is handed to its cleaner after reporting
#   completed / steps.  A cleaner error (Err or exception) is appended to the
#   aggregate as "<cleaner name>: <message>" and the next group still runs.
#   Cancellation is checked between groups only.  The last report is
#   (1.0, "Done").

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from result import Err, Ok, Result

from rcleaner.backup.store import BackupStore
from rcleaner.cleaners import CATEGORY_ORDER, Cleaner, default_cleaners
from rcleaner.config.schema import AppConfig
from rcleaner.models.cleanup import CancelCheck, CleanProgress, CleanupItem, CleanupResult
from rcleaner.models.enums import CleanupCategory
from rcleaner.models.errors import CleanerError
from rcleaner.safety.checker import SafetyChecker

logger = logging.getLogger(__name__)

DONE_LABEL = "Done"
CANCELLED_MESSAGE = "Cleaning cancelled"


def _ignore_progress(_fraction: float, _label: str) -> None:
    return None


class Orchestrator:
    """Runs one configuration snapshot through scanning and cleaning.

    Reloading configuration means building a new ``Orchestrator`` with the
    new snapshot; nothing here is mutated after construction.
    """

    def __init__(
        self,
        config: AppConfig,
        cleaners: Mapping[CleanupCategory, Cleaner] | None = None,
        checker: SafetyChecker | None = None,
    ) -> None:
        self.config = config
        if cleaners is None:
            cleaners = default_cleaners(config, BackupStore.from_config(config))
        self.cleaners = dict(cleaners)
        self.checker = checker or SafetyChecker(config)

    def _ordered(self) -> list[tuple[CleanupCategory, Cleaner]]:
        return [(category, self.cleaners[category]) for category in CATEGORY_ORDER if category in self.cleaners]

    def scan_all(self) -> Result[list[CleanupItem], CleanerError]:
        items: list[CleanupItem] = []
        for _, cleaner in self._ordered():
            try:
                items.extend(cleaner.scan())
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s scan failed: %s", cleaner.name, exc)

        for item in items:
            applied = self.checker.apply_to_item(item)
            if isinstance(applied, Err):
                logger.warning("Safety check failed for %s: %s", item.name, applied.unwrap_err())
                item.mark_blocked(f"Safety check failed: {applied.unwrap_err()}")
        return Ok(items)

    def clean_selected(self, items: Sequence[CleanupItem], dry_run: bool) -> Result[CleanupResult, CleanerError]:
        return self.clean_selected_with_progress(items, dry_run, _ignore_progress)

    def clean_selected_with_progress(
        self,
        items: Sequence[CleanupItem],
        dry_run: bool,
        on_progress: CleanProgress,
        cancel_check: CancelCheck | None = None,
    ) -> Result[CleanupResult, CleanerError]:
        groups: list[tuple[Cleaner, list[CleanupItem]]] = []
        for category, cleaner in self._ordered():
            selected = [item for item in items if item.selected and item.category is category]
            if selected:
                groups.append((cleaner, selected))

        steps = max(1, len(groups))
        total = CleanupResult()
        for completed, (cleaner, selected) in enumerate(groups):
            if cancel_check is not None and cancel_check():
                logger.info("Cleaning cancelled after %d of %d groups", completed, len(groups))
                total.errors.append(CANCELLED_MESSAGE)
                break

            on_progress(completed / steps, cleaner.name)
            try:
                outcome = cleaner.clean(selected, dry_run)
            except Exception as exc:  # noqa: BLE001
                total.errors.append(f"{cleaner.name}: {exc}")
                continue
            if isinstance(outcome, Err):
                total.errors.append(f"{cleaner.name}: {outcome.unwrap_err()}")
                continue
            total = total.merge(outcome.unwrap())

        on_progress(1.0, DONE_LABEL)
        return Ok(total)
