"""Delta math and unit scaling shared by the parsers."""

from __future__ import annotations

from collections.abc import Iterable

from metrics_api.models.metric import DATA_UNITS, RATE_UNITS


def trim_bytes_unit(unit: str) -> str:
    return unit.strip().upper()


def convert_bytes(value: float, unit: str) -> tuple[float, str]:
    """Scale ``value`` up the unit ladder while it stays at or above 1.

    ``convert_bytes(1000, "B/S") == (1.0, "KB/S")``. The ladder saturates at
    the petabyte unit and unknown units come back unchanged.
    """
    unit = trim_bytes_unit(unit)
    ladder = DATA_UNITS if unit in DATA_UNITS else RATE_UNITS
    if unit not in ladder:
        return value, unit

    index = ladder.index(unit)
    while index + 1 < len(ladder) and value / 1000 >= 1:
        value /= 1000
        index += 1
    return value, ladder[index]


def calculate_rate(now: float, last: float, interval: float) -> float:
    """Per-second change between two counter readings; ``-1`` for a zero interval."""
    if interval == 0:
        return -1
    return (now - last) / interval


def counter_rate(now: float, last: float | None, interval: float) -> float:
    """Rate of a monotonic kernel counter.

    A counter seen for the first time, or one that went backwards (reset,
    reboot, wrap), has no meaningful delta and reports ``0``.
    """
    if last is None or now < last:
        return 0.0
    return calculate_rate(now, last, interval)


def calculate_cpu_usage(now_cycles: int, last_cycles: int, now_idle: int, last_idle: int) -> float:
    total_delta = now_cycles - last_cycles
    if total_delta <= 0:
        return 0.0
    idle_delta = now_idle - last_idle
    if idle_delta <= 0:
        return 0.0
    usage = (1.0 - idle_delta / total_delta) * 100
    return max(usage, 0.0)


def sum_counters(fields: Iterable[str]) -> int:
    """Sum non-negative integer columns; raises ``ValueError`` on bad input."""
    total = 0
    for item in fields:
        number = int(item)
        if number < 0:
            raise ValueError(f"negative counter: {item}")
        total += number
    return total


def trim_subnet_mask(cidr: str) -> str:
    return cidr.split("/", 1)[0]


def try_int(raw: str | None) -> int:
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return -1


def try_float(raw: str | None) -> float:
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return -1.0
