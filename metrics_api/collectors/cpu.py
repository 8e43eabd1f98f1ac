from __future__ import annotations

import logging

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.units import calculate_cpu_usage, sum_counters
from metrics_api.models.metric import CELSIUS, PERCENT, CpuUsageMetric, MetricUnit
from metrics_api.models.snapshot import CpuSnap, CpuSnapUnit

logger = logging.getLogger(__name__)

# /proc/stat: "cpu  user nice system idle iowait irq softirq steal guest guest_nice"
IDLE_COLUMN = 4


def read_cpu_temperature(reader: TextSource, paths: ProcfsPaths) -> tuple[float, str]:
    """Temperature of the first thermal zone; ``-1`` if it cannot be read.

    ARM SoCs usually share one sensor across a cluster, so this single value
    is reported for every core.
    """
    try:
        raw = reader.read_file(paths.resolve("cpu_temp"))
        millidegrees = int(raw.strip())
    except (OSError, ValueError):
        return -1, CELSIUS
    return millidegrees / 1000, CELSIUS


def read_cpu_idle(reader: TextSource, paths: ProcfsPaths) -> tuple[int, int, list[CpuSnapUnit]]:
    """Return ``(all_cycles, all_idle, per_core)`` from ``/proc/stat``.

    Raises ``OSError`` when the file cannot be read.
    """
    raw = reader.read_file(paths.resolve("cpu_usage"))

    all_cycles = 0
    all_idle = 0
    cores: list[CpuSnapUnit] = []
    for line in raw.splitlines():
        if not line.startswith("cpu"):
            continue
        fields = line.split()
        if len(fields) <= IDLE_COLUMN:
            continue
        try:
            idle = int(fields[IDLE_COLUMN])
            cycles = sum_counters(fields[1:])
        except ValueError:
            logger.debug("Skipping malformed cpu line: %r", line)
            continue

        if fields[0] == "cpu":
            all_cycles = cycles
            all_idle = idle
        else:
            cores.append(CpuSnapUnit(cycles=cycles, idle=idle))
    return all_cycles, all_idle, cores


def read_total_cpu_usage(
    reader: TextSource, paths: ProcfsPaths, last_snap: CpuSnap
) -> tuple[float, list[float]]:
    """Aggregate and per-core usage since ``last_snap``, updating it in place.

    Cores that did not exist in the previous sample (hot-plug) report ``-1``.
    """
    try:
        now_cycles, now_idle, now_cores = read_cpu_idle(reader, paths)
    except OSError:
        logger.debug("Could not read %s", paths.resolve("cpu_usage"))
        return 0.0, []

    total_usage = calculate_cpu_usage(now_cycles, last_snap.all_cycles, now_idle, last_snap.all_idle)

    cores_usage: list[float] = []
    for index, core in enumerate(now_cores):
        if index >= len(last_snap.cores):
            cores_usage.append(-1)
            continue
        last = last_snap.cores[index]
        cores_usage.append(calculate_cpu_usage(core.cycles, last.cycles, core.idle, last.idle))

    last_snap.all_cycles = now_cycles
    last_snap.all_idle = now_idle
    last_snap.cores = now_cores
    last_snap.touch()
    return total_usage, cores_usage


def read_cpu_metric(reader: TextSource, paths: ProcfsPaths, last_snap: CpuSnap) -> dict[str, CpuUsageMetric]:
    total_usage, cores_usage = read_total_cpu_usage(reader, paths, last_snap)
    temperature, temperature_unit = read_cpu_temperature(reader, paths)

    def _entry(usage: float) -> CpuUsageMetric:
        return CpuUsageMetric(
            usage=MetricUnit(value=usage, unit=PERCENT),
            temperature=MetricUnit(value=temperature, unit=temperature_unit),
        )

    result = {"total": _entry(total_usage)}
    for index, usage in enumerate(cores_usage):
        result[f"cpu{index}"] = _entry(usage)
    return result
