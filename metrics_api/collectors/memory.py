from __future__ import annotations

import logging

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.units import convert_bytes
from metrics_api.models.metric import KILO_BYTE, PERCENT, MemoryMetric, MetricUnit

logger = logging.getLogger(__name__)


def parse_meminfo(raw: str) -> dict[str, int]:
    """``{"MemTotal": kB, ...}`` for every well-formed line."""
    values: dict[str, int] = {}
    for line in raw.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        try:
            values[fields[0].rstrip(":")] = int(fields[1])
        except ValueError:
            continue
    return values


def read_memory_metric(reader: TextSource, paths: ProcfsPaths) -> MemoryMetric:
    try:
        raw = reader.read_file(paths.resolve("system_memory_info"))
    except OSError:
        logger.debug("Could not read %s", paths.resolve("system_memory_info"))
        return MemoryMetric()

    values = parse_meminfo(raw)
    total = values.get("MemTotal", 0)
    # kernels before 3.14 have no MemAvailable
    available = values.get("MemAvailable", values.get("MemFree", 0))
    if total <= 0:
        return MemoryMetric()

    used = total - available
    total_value, total_unit = convert_bytes(total, KILO_BYTE)
    used_value, used_unit = convert_bytes(used, KILO_BYTE)
    return MemoryMetric(
        total=MetricUnit(value=total_value, unit=total_unit),
        used=MetricUnit(value=used_value, unit=used_unit),
        used_percent=MetricUnit(value=used * 100 / total, unit=PERCENT),
    )
