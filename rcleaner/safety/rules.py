# Path rules deciding which cleanup items are protected.
#
# Evaluation order, first match wins:
#   1. built-in system prefixes (not configurable)
#   2. whitelist entries from config
#   3. blacklist entries from config
#
# Every stage blocks.  Whitelisted paths are protected too: the whitelist
# lists locations the user wants left alone, not locations cleared for
# deletion.  Items without a path (packages, images) pass untouched.
#
# Pattern forms, after ``~`` expansion:
#   contains * or ?   -> anchored regex, * -> .*, ? -> ., rest literal
#   absolute literal  -> the path itself or anything below it
#   relative literal  -> substring

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from rcleaner.config.schema import AppConfig
from rcleaner.models.cleanup import CleanupItem
from rcleaner.models.enums import SafetyRuleType
from rcleaner.safety.permissions import is_within

type PathMatcher = Callable[[str], bool]


@dataclass(slots=True, frozen=True)
class SafetyRule:
    pattern: str
    description: str
    rule_type: SafetyRuleType


BUILTIN_RULES: tuple[SafetyRule, ...] = (
    SafetyRule("/boot", "Bootloader files", SafetyRuleType.PROTECT_BOOTLOADER),
    SafetyRule("/lib/modules", "Kernel modules", SafetyRuleType.PROTECT_KERNEL),
    SafetyRule("/usr/lib/modules", "Kernel modules", SafetyRuleType.PROTECT_KERNEL),
    SafetyRule("/bin", "System binaries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/sbin", "System binaries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/usr/bin", "System binaries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/usr/sbin", "System binaries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/lib", "System libraries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/lib64", "System libraries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/usr/lib", "System libraries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/usr/lib64", "System libraries", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/etc", "System configuration", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/var/lib", "System state", SafetyRuleType.PROTECT_SYSTEM_PACKAGES),
    SafetyRule("/root", "Root home directory", SafetyRuleType.PROTECT_USER_HOME),
)


def expand_home(pattern: str, home: str | None) -> str:
    if not home or not pattern.startswith("~"):
        return pattern
    if pattern == "~" or pattern.startswith("~/"):
        return home.rstrip("/") + pattern[1:]
    return pattern


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def compile_pattern(pattern: str, home: str | None = None) -> PathMatcher:
    expanded = expand_home(pattern, home)
    if "*" in expanded or "?" in expanded:
        regex = glob_to_regex(expanded)
        return lambda path: regex.fullmatch(path) is not None
    if expanded.startswith("/"):
        return lambda path: is_within(path, expanded)
    return lambda path: expanded in path


@dataclass(slots=True)
class _CompiledRule:
    rule: SafetyRule
    matches: PathMatcher


@dataclass(slots=True)
class SafetyRuleSet:
    whitelist: list[SafetyRule] = field(default_factory=list)
    blacklist: list[SafetyRule] = field(default_factory=list)
    home: str | None = None
    _compiled: list[_CompiledRule] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        ordered = [*BUILTIN_RULES, *self.whitelist, *self.blacklist]
        self._compiled = [_CompiledRule(rule, compile_pattern(rule.pattern, self.home)) for rule in ordered]

    @classmethod
    def from_config(cls, config: AppConfig, home: str | None = None) -> SafetyRuleSet:
        if home is None:
            home = str(Path.home())
        whitelist = [
            SafetyRule(path, f"Whitelist: {path}", SafetyRuleType.PROTECT_USER_HOME)
            for path in config.rules.whitelist.paths
        ]
        blacklist = [
            SafetyRule(pattern, f"Blacklist: {pattern}", SafetyRuleType.PROTECT_SYSTEM_PACKAGES)
            for pattern in config.rules.blacklist.patterns
        ]
        return cls(whitelist=whitelist, blacklist=blacklist, home=home)

    def matching_rule(self, path: str) -> SafetyRule | None:
        for compiled in self._compiled:
            if compiled.matches(path):
                return compiled.rule
        return None

    def check_item(self, item: CleanupItem) -> bool:
        """True when no rule protects the item."""
        return self.check_item_reason(item) is None

    def check_item_reason(self, item: CleanupItem) -> str | None:
        if item.path is None:
            return None
        rule = self.matching_rule(item.path)
        if rule is None:
            return None
        return f"Protected by rule: {rule.description}"
