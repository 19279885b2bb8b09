# Size estimation and content fingerprints for backup sources.
#
# A fingerprint is a hex SHA-256:
#   file       -> hash of the file bytes
#   directory  -> one running hash over every regular file in the tree, in
#                 lexicographic order of the path relative to the root; for
#                 each file the relative path is fed first, then its bytes.
#
# Because only relative paths enter the hash, renaming the root directory
# leaves the fingerprint unchanged, while editing, adding, removing or
# renaming any file inside the tree changes it.  Symbolic links inside a
# tree are neither followed nor hashed; a top-level link is fingerprinted by
# its target string.

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterator
from pathlib import Path

_CHUNK_SIZE = 1024 * 1024


def iter_tree_files(root: Path) -> Iterator[tuple[str, Path]]:
    """Yield ``(relative_path, absolute_path)`` for regular files under *root*."""
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        for filename in filenames:
            full = Path(dirpath) / filename
            if full.is_symlink() or not full.is_file():
                continue
            yield full.relative_to(root).as_posix(), full


def path_size(path: Path) -> int:
    """Apparent size of a file, or the sum of regular files under a directory.

    A missing path has size 0.
    """
    if path.is_symlink():
        return 0
    if path.is_file():
        return path.stat().st_size
    if not path.is_dir():
        return 0
    total = 0
    for _, full in iter_tree_files(path):
        try:
            total += full.stat().st_size
        except OSError:
            continue
    return total


def estimate_total_size(paths: list[Path]) -> int:
    return sum(path_size(path) for path in paths)


def _update_with_file(hasher: hashlib._Hash, path: Path) -> None:  # pyright: ignore[reportPrivateUsage]
    with path.open("rb") as handle:
        while chunk := handle.read(_CHUNK_SIZE):
            hasher.update(chunk)


def hash_path(path: Path) -> str:
    """Return the content fingerprint of *path*.

    Raises ``OSError`` when a file cannot be read.
    """
    hasher = hashlib.sha256()
    if path.is_symlink():
        hasher.update(os.fsencode(os.readlink(path)))
    elif path.is_file():
        _update_with_file(hasher, path)
    elif path.is_dir():
        for relative, full in sorted(iter_tree_files(path)):
            hasher.update(os.fsencode(relative))
            _update_with_file(hasher, full)
    return hasher.hexdigest()
