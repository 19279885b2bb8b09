from __future__ import annotations

import re

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

# Two-letter units are SI (docker, flatpak); bare letters and IEC units are binary (journalctl).
_SIZE_MULTIPLIERS: dict[str, int] = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1000,
    "kib": 1024,
    "m": 1024**2,
    "mb": 1000**2,
    "mib": 1024**2,
    "g": 1024**3,
    "gb": 1000**3,
    "gib": 1024**3,
    "t": 1024**4,
    "tb": 1000**4,
    "tib": 1024**4,
}

_SIZE_RE = re.compile(r"^\s*(\d+(?:[.,]\d+)?)\s*([a-zA-Z]*)\s*$")


def format_bytes(size: int) -> str:
    value = float(size)
    unit_index = 0
    while value >= 1024.0 and unit_index < len(_UNITS) - 1:
        value /= 1024.0
        unit_index += 1
    return f"{value:.2f} {_UNITS[unit_index]}"


def format_percentage(part: int, total: int) -> str:
    if total == 0:
        return "0%"
    return f"{part * 100 // total}%"


def parse_size(text: str) -> int | None:
    """Parse sizes printed by external tools (``1.2GB``, ``512 MB``, ``3,4 kB``).

    Unknown units are treated as bytes. Returns None for unparsable text.
    """
    match = _SIZE_RE.match(text.strip().rstrip(".,"))
    if match is None:
        return None
    number = float(match.group(1).replace(",", "."))
    multiplier = _SIZE_MULTIPLIERS.get(match.group(2).lower(), 1)
    return int(number * multiplier)
