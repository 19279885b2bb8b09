from __future__ import annotations

from dataclasses import dataclass

from rcleaner.models.enums import ErrorCode


@dataclass(slots=True, frozen=True)
class CleanerError:
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_os_error(cls, exc: OSError, code: ErrorCode = ErrorCode.IO) -> CleanerError:
        """Wrap an OS-level failure; plain IO errors are refined by exception type."""
        if code is ErrorCode.IO:
            if isinstance(exc, FileNotFoundError):
                code = ErrorCode.NOT_FOUND
            elif isinstance(exc, PermissionError):
                code = ErrorCode.PERMISSION
        return cls(code=code, message=str(exc))
