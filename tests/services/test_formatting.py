from rcleaner.services.formatting import format_bytes, format_percentage, parse_size


def test_format_bytes_outputs() -> None:
    assert format_bytes(0) == "0.00 B"
    assert format_bytes(1024) == "1.00 KB"
    assert format_bytes(1536) == "1.50 KB"
    assert format_bytes(1024 * 1024) == "1.00 MB"


def test_format_percentage() -> None:
    assert format_percentage(1, 4) == "25%"
    assert format_percentage(5, 0) == "0%"


def test_parse_size_tool_outputs() -> None:
    assert parse_size("512 MB") == 512 * 1000**2
    assert parse_size("1.5GB") == int(1.5 * 1000**3)
    assert parse_size("3,5 kB") == 3500
    assert parse_size("42") == 42
    assert parse_size("8.0M.") == 8 * 1024**2


def test_parse_size_rejects_garbage() -> None:
    assert parse_size("") is None
    assert parse_size("lots") is None


def test_parse_size_si_and_binary_units() -> None:
    assert parse_size("1GB") == 1_000_000_000
    assert parse_size("2 TB") == 2 * 1000**4
    assert parse_size("1G") == 1024**3
    assert parse_size("1 GiB") == 1024**3
    assert parse_size("4KiB") == 4096
