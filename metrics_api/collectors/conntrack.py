from __future__ import annotations

import logging
from dataclasses import dataclass, field

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.units import convert_bytes, try_float, try_int
from metrics_api.models.metric import BYTE, MetricUnit, NetworkConnection, NetworkConnectionMetric

logger = logging.getLogger(__name__)

# fixed header of an nf_conntrack line
IP_FAMILY_INDEX = 0
PROTOCOL_INDEX = 2
STATE_INDEX = 5  # TCP only; UDP lines start their key=value pairs here
MIN_FIELDS = 6


@dataclass
class RawConnection:
    ip_family: str
    protocol: str
    state: str = ""
    kv: dict[str, str] = field(default_factory=dict)


def parse_connection_line(line: str) -> tuple[RawConnection, RawConnection] | None:
    """Split one conntrack entry into its origin and reply legs.

    ::

        ipv4 2 tcp 6 95 TIME_WAIT src=192.168.0.236 dst=192.168.0.1 sport=55674 dport=5000
            packets=6 bytes=426 src=192.168.0.1 dst=192.168.0.236 sport=5000 dport=55674
            packets=5 bytes=3007 [ASSURED] mark=0 zone=0 use=2

    The kernel writes the origin tuple first and the reply tuple second with
    the same keys, so the first occurrence of a key belongs to the origin and
    a repeated key to the reply.
    """
    fields = line.split()
    if len(fields) < MIN_FIELDS:
        return None

    ip_family = fields[IP_FAMILY_INDEX]
    protocol = fields[PROTOCOL_INDEX]
    state_token = fields[STATE_INDEX]
    state = state_token if "=" not in state_token else ""

    origin = RawConnection(ip_family=ip_family, protocol=protocol, state=state)
    reply = RawConnection(ip_family=ip_family, protocol=protocol, state=state)
    for item in fields:
        key, sep, value = item.partition("=")
        if not sep:
            continue
        if key in origin.kv:
            reply.kv[key] = value
        else:
            origin.kv[key] = value
    return origin, reply


def to_network_connection(raw: RawConnection) -> NetworkConnection:
    traffic, unit = convert_bytes(try_float(raw.kv.get("bytes")), BYTE)
    return NetworkConnection(
        ip_family=raw.ip_family,
        source_ip=raw.kv.get("src", ""),
        source_port=try_int(raw.kv.get("sport")),
        destination_ip=raw.kv.get("dst", ""),
        destination_port=try_int(raw.kv.get("dport")),
        protocol=raw.protocol,
        state=raw.state,
        traffic=MetricUnit(value=traffic, unit=unit),
        packets=try_int(raw.kv.get("packets")),
    )


def _read_conntrack_table(reader: TextSource, paths: ProcfsPaths) -> str:
    for path in paths.resolve_all("network_connection"):
        if not reader.exists(path):
            continue
        try:
            return reader.read_file(path)
        except OSError:
            logger.debug("Could not read %s", path)
    return ""


def read_connection_metric(reader: TextSource, paths: ProcfsPaths) -> NetworkConnectionMetric:
    """Tracked flows; ``counts`` holds one entry per flow, ``connections`` both legs."""
    metric = NetworkConnectionMetric()
    for line in _read_conntrack_table(reader, paths).splitlines():
        if not line.strip():
            continue
        legs = parse_connection_line(line)
        if legs is None:
            logger.debug("Skipping short conntrack line: %r", line)
            continue

        origin, reply = legs
        metric.counts.add(origin.protocol)
        metric.connections.append(to_network_connection(origin))
        metric.connections.append(to_network_connection(reply))
    return metric
