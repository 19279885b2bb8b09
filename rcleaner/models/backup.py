from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(slots=True, frozen=True)
class BackupItem:
    original_path: str
    backup_path: str
    size: int
    # Hex SHA-256 of the source at backup time (see services.fingerprint).
    checksum: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_path": self.original_path,
            "backup_path": self.backup_path,
            "size": self.size,
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> BackupItem:
        return cls(
            original_path=str(payload["original_path"]),
            backup_path=str(payload["backup_path"]),
            size=int(payload["size"]),
            checksum=str(payload["checksum"]),
        )


@dataclass(slots=True, frozen=True)
class Backup:
    id: str
    timestamp: datetime
    items: tuple[BackupItem, ...] = field(default_factory=tuple)
    size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "items": [item.to_dict() for item in self.items],
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Backup:
        timestamp = datetime.fromisoformat(str(payload["timestamp"]))
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return cls(
            id=str(payload["id"]),
            timestamp=timestamp,
            items=tuple(BackupItem.from_dict(x) for x in payload["items"]),
            size=int(payload["size"]),
        )
