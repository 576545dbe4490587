"""Human-scaled byte-rate formatting."""

from __future__ import annotations

_KIB = 1024.0
_UNITS = ("B/s", "KB/s", "MB/s", "GB/s")


def format_rate(bytes_per_second: float) -> tuple[float, str]:
    """Scale a byte rate to the largest 1024-based unit below it.

    GB/s is the largest unit; faster rates are reported as large GB/s values.

    Args:
        bytes_per_second: Rate in bytes per second.

    Returns:
        ``(value, unit)``, e.g. ``(1.5, "KB/s")`` for 1536.0.
    """
    value = bytes_per_second
    for unit in _UNITS[:-1]:
        if value < _KIB:
            return value, unit
        value /= _KIB
    return value, _UNITS[-1]


def format_bytes_rate(bytes_per_second: float) -> str:
    """Render a byte rate with two decimals, e.g. ``"1.50 KB/s"``.

    Args:
        bytes_per_second: Rate in bytes per second.

    Returns:
        The scaled value followed by its unit.
    """
    value, unit = format_rate(bytes_per_second)
    return f"{value:.2f} {unit}"
