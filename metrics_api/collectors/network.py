from __future__ import annotations

import logging

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.units import convert_bytes, counter_rate
from metrics_api.models.metric import B_SECOND, MetricUnit, NetworkIoMetric
from metrics_api.models.snapshot import NetSnap, NetSnapUnit

logger = logging.getLogger(__name__)

# columns after "iface:" in /proc/net/dev
RX_BYTES_COLUMN = 0
TX_BYTES_COLUMN = 8

LOOPBACK_PREFIXES = ("loopback",)


def _is_loopback(name: str) -> bool:
    return name == "lo" or name.startswith(LOOPBACK_PREFIXES)


def _io_metric(rx_rate: float, tx_rate: float) -> NetworkIoMetric:
    rx_value, rx_unit = convert_bytes(rx_rate, B_SECOND)
    tx_value, tx_unit = convert_bytes(tx_rate, B_SECOND)
    return NetworkIoMetric(
        incoming=MetricUnit(value=rx_value, unit=rx_unit),
        outgoing=MetricUnit(value=tx_value, unit=tx_unit),
    )


def read_network_metric(
    reader: TextSource, paths: ProcfsPaths, last_snap: NetSnap, interval: float
) -> dict[str, NetworkIoMetric]:
    """Per-interface receive/transmit throughput plus a ``"total"`` entry."""
    try:
        raw = reader.read_file(paths.resolve("network_device_io"))
    except OSError:
        logger.debug("Could not read %s", paths.resolve("network_device_io"))
        raw = ""

    result: dict[str, NetworkIoMetric] = {}
    total_rx = 0.0
    total_tx = 0.0

    for line in raw.splitlines():
        if ":" not in line:
            continue
        name, _, counters = line.partition(":")
        name = name.strip()
        if _is_loopback(name):
            continue
        fields = counters.split()
        try:
            rx_now = float(fields[RX_BYTES_COLUMN])
            tx_now = float(fields[TX_BYTES_COLUMN])
        except (IndexError, ValueError):
            logger.debug("Skipping malformed interface line: %r", line)
            continue

        last = last_snap.interfaces.get(name)
        rx_rate = counter_rate(rx_now, last.rx_bytes if last else None, interval)
        tx_rate = counter_rate(tx_now, last.tx_bytes if last else None, interval)
        total_rx += rx_rate
        total_tx += tx_rate

        last_snap.interfaces[name] = NetSnapUnit(rx_bytes=rx_now, tx_bytes=tx_now)
        result[name] = _io_metric(rx_rate, tx_rate)

    last_snap.touch()
    result["total"] = _io_metric(total_rx, total_tx)
    return result
