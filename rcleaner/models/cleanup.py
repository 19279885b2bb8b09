from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Callable

from rcleaner.models.enums import CleanupCategory, SourceKind

# (fraction in [0, 1], label of the step about to run)
CleanProgress = Callable[[float, str], None]
CancelCheck = Callable[[], bool]


@dataclass(slots=True, frozen=True)
class CleanupSource:
    kind: SourceKind
    name: str = ""

    @classmethod
    def filesystem(cls) -> CleanupSource:
        return cls(SourceKind.FILESYSTEM)

    @classmethod
    def package_manager(cls, name: str) -> CleanupSource:
        return cls(SourceKind.PACKAGE_MANAGER, name)

    @classmethod
    def container(cls, runtime: str) -> CleanupSource:
        return cls(SourceKind.CONTAINER, runtime)

    @property
    def is_package(self) -> bool:
        return self.kind is SourceKind.PACKAGE_MANAGER

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "name": self.name}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CleanupSource:
        return cls(SourceKind(str(payload["kind"])), str(payload.get("name", "")))


@dataclass(slots=True)
class CleanupItem:
    """A candidate for deletion, created fresh on every scan.

    ``can_clean`` is the safety verdict and ``selected`` the operator's
    intent. Cleaners act only on items that are both.
    """

    id: str
    name: str
    category: CleanupCategory
    source: CleanupSource
    path: str | None = None
    size: int = 0
    description: str = ""
    selected: bool = False
    can_clean: bool = True
    blocked_reason: str | None = None
    dependencies: list[str] = field(default_factory=list)

    def mark_blocked(self, reason: str) -> None:
        # First reason wins; later stages only flip the flag.
        self.can_clean = False
        if self.blocked_reason is None:
            self.blocked_reason = reason

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "size": self.size,
            "description": self.description,
            "category": self.category.value,
            "source": self.source.to_dict(),
            "selected": self.selected,
            "canClean": self.can_clean,
            "blockedReason": self.blocked_reason,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CleanupItem:
        path = payload.get("path")
        reason = payload.get("blockedReason")
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            category=CleanupCategory(str(payload["category"])),
            source=CleanupSource.from_dict(payload["source"]),
            path=str(path) if path is not None else None,
            size=int(payload.get("size", 0)),
            description=str(payload.get("description", "")),
            selected=bool(payload.get("selected", False)),
            can_clean=bool(payload.get("canClean", True)),
            blocked_reason=str(reason) if reason is not None else None,
            dependencies=[str(dep) for dep in payload.get("dependencies", [])],
        )


@dataclass(slots=True)
class CleanupResult:
    cleaned_items: int = 0
    freed_bytes: int = 0
    skipped_items: int = 0
    errors: list[str] = field(default_factory=list)

    def merge(self, other: CleanupResult) -> CleanupResult:
        return CleanupResult(
            cleaned_items=self.cleaned_items + other.cleaned_items,
            freed_bytes=self.freed_bytes + other.freed_bytes,
            skipped_items=self.skipped_items + other.skipped_items,
            errors=[*self.errors, *other.errors],
        )

    def __add__(self, other: CleanupResult) -> CleanupResult:
        return self.merge(other)

    def record_cleaned(self, size: int) -> None:
        self.cleaned_items += 1
        self.freed_bytes += size

    @classmethod
    def combine(cls, results: Iterable[CleanupResult]) -> CleanupResult:
        total = cls()
        for result in results:
            total = total.merge(result)
        return total
