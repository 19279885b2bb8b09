from __future__ import annotations

from pathlib import Path

from result import Err, Ok, Result

from rcleaner.config.schema import AppConfig
from rcleaner.models.cleanup import CleanupItem
from rcleaner.models.errors import CleanerError
from rcleaner.safety.dependencies import DependencyOracle
from rcleaner.safety.permissions import can_clean_path
from rcleaner.safety.rules import SafetyRuleSet
from rcleaner.system.commands import is_root as effective_root

PERMISSION_REASON = "Insufficient permissions to clean path"
DEPENDENTS_REASON = "Package has dependents"


class SafetyChecker:
    """Per-item safety verdict: permissions, then path rules, then dependents.

    ``apply_to_item`` records the verdict on the item; the first stage to
    reject sets ``blocked_reason`` and later stages still run so that
    ``dependencies`` is filled in for display.  Applying twice is harmless.
    """

    def __init__(
        self,
        config: AppConfig,
        oracle: DependencyOracle | None = None,
        *,
        is_root: bool | None = None,
        home: str | None = None,
    ) -> None:
        self.config = config
        self.oracle = oracle or DependencyOracle()
        self.is_root = effective_root() if is_root is None else is_root
        self.home = str(Path.home()) if home is None else home
        self.rules = SafetyRuleSet.from_config(config, home=self.home)

    @property
    def bypassed(self) -> bool:
        """Safety switched off by someone allowed to switch it off."""
        safety = self.config.safety
        return not safety.enabled and (not safety.only_root_can_disable or self.is_root)

    def _path_allowed(self, item: CleanupItem) -> bool:
        return item.path is None or can_clean_path(item.path, root=self.is_root, home=self.home)

    def _dependents(self, item: CleanupItem) -> Result[list[str], CleanerError]:
        if not item.source.is_package:
            return Ok([])
        return self.oracle.check_dependencies(item.source.name, item.name)

    def is_safe_to_clean(self, item: CleanupItem) -> Result[bool, CleanerError]:
        if self.bypassed:
            return Ok(True)
        if not self._path_allowed(item):
            return Ok(False)
        if not self.rules.check_item(item):
            return Ok(False)
        deps = self._dependents(item)
        if isinstance(deps, Err):
            return deps
        return Ok(not deps.unwrap())

    def apply_to_item(self, item: CleanupItem) -> Result[None, CleanerError]:
        if self.bypassed:
            return Ok(None)

        if not self._path_allowed(item):
            item.mark_blocked(PERMISSION_REASON)

        reason = self.rules.check_item_reason(item)
        if reason is not None:
            item.mark_blocked(reason)

        deps = self._dependents(item)
        if isinstance(deps, Err):
            return deps
        if deps.unwrap():
            item.dependencies = deps.unwrap()
            item.mark_blocked(DEPENDENTS_REASON)
        return Ok(None)
