from __future__ import annotations

import logging

import psutil

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.units import convert_bytes, counter_rate
from metrics_api.models.metric import B_SECOND, BYTE, PERCENT, MetricUnit, StorageIoMetric
from metrics_api.models.snapshot import DiskSnap, DiskSnapUnit

logger = logging.getLogger(__name__)

VIRTUAL_FS_TYPES = frozenset({"proc", "sysfs", "devtmpfs", "tmpfs", "cgroup", "debugfs"})
PSEUDO_DEVICE_PREFIXES = ("loop", "ram", "nbd", "zram")
SECTOR_SIZE = 512

# /proc/diskstats columns
DEVICE_NAME_COLUMN = 2
SECTORS_READ_COLUMN = 5
SECTORS_WRITTEN_COLUMN = 9
MIN_DISKSTATS_FIELDS = 14


def _unit(raw: float, unit: str) -> MetricUnit:
    value, scaled_unit = convert_bytes(raw, unit)
    return MetricUnit(value=value, unit=scaled_unit)


def read_disk_usage(reader: TextSource, paths: ProcfsPaths) -> dict[str, StorageIoMetric]:
    """Capacity of every mounted block device, keyed by device name."""
    result: dict[str, StorageIoMetric] = {}
    try:
        raw = reader.read_file(paths.resolve("storage_device_mounts"))
    except OSError:
        logger.debug("Could not read %s", paths.resolve("storage_device_mounts"))
        return result

    for line in raw.splitlines():
        fields = line.split()
        if len(fields) < 3:
            continue
        source, mount_point, fs_type = fields[0], fields[1], fields[2]
        if source.startswith("none") or fs_type in VIRTUAL_FS_TYPES:
            continue
        # overlay, ubi etc. have no /dev node to attribute the numbers to
        if not source.startswith("/dev/"):
            continue

        device = source.removeprefix("/dev/")
        if device in result:
            continue

        try:
            usage = psutil.disk_usage(mount_point.replace("\\040", " "))
        except OSError:
            logger.debug("statvfs failed for %s", mount_point)
            continue
        if usage.total == 0:
            continue

        result[device] = StorageIoMetric(
            total=_unit(usage.total, BYTE),
            used=_unit(usage.used, BYTE),
            used_percent=MetricUnit(value=usage.used / usage.total * 100, unit=PERCENT),
        )
    return result


def read_disk_io_stats(
    reader: TextSource,
    paths: ProcfsPaths,
    metric: dict[str, StorageIoMetric],
    last_snap: DiskSnap,
    interval: float,
) -> None:
    """Fill read/write rates into ``metric`` for devices that already have usage."""
    try:
        raw = reader.read_file(paths.resolve("storage_device_io"))
    except OSError:
        logger.debug("Could not read %s", paths.resolve("storage_device_io"))
        return

    for line in raw.splitlines():
        fields = line.split()
        if len(fields) < MIN_DISKSTATS_FIELDS:
            continue
        device = fields[DEVICE_NAME_COLUMN]
        if device.startswith(PSEUDO_DEVICE_PREFIXES):
            continue
        try:
            read_now = float(fields[SECTORS_READ_COLUMN]) * SECTOR_SIZE
            write_now = float(fields[SECTORS_WRITTEN_COLUMN]) * SECTOR_SIZE
        except ValueError:
            logger.debug("Skipping malformed diskstats line: %r", line)
            continue

        last = last_snap.devices.get(device)
        last_snap.devices[device] = DiskSnapUnit(read_bytes=read_now, write_bytes=write_now)

        device_metric = metric.get(device)
        if device_metric is None:
            continue
        device_metric.read = _unit(counter_rate(read_now, last.read_bytes if last else None, interval), B_SECOND)
        device_metric.write = _unit(counter_rate(write_now, last.write_bytes if last else None, interval), B_SECOND)

    last_snap.touch()


def read_storage_metric(
    reader: TextSource, paths: ProcfsPaths, last_snap: DiskSnap, interval: float
) -> dict[str, StorageIoMetric]:
    metric = read_disk_usage(reader, paths)
    read_disk_io_stats(reader, paths, metric, last_snap, interval)
    return metric
