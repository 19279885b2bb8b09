from __future__ import annotations

from pathlib import PurePosixPath

TEMP_ROOTS: tuple[str, ...] = ("/tmp", "/var/tmp")


def is_within(path: str, root: str) -> bool:
    """True when *path* is *root* or lies below it, compared by components."""
    return PurePosixPath(path).is_relative_to(PurePosixPath(root))


def can_clean_path(path: str, *, root: bool, home: str | None) -> bool:
    """Whether the effective user may delete *path*.

    Root may touch anything; everyone else is limited to the temp
    directories and their own home.
    """
    if root:
        return True
    if any(is_within(path, temp) for temp in TEMP_ROOTS):
        return True
    return bool(home) and is_within(path, home)
