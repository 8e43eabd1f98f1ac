from __future__ import annotations

import logging

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.runner import CommandError, ProcessRunner
from metrics_api.collectors.units import trim_subnet_mask
from metrics_api.models.metric import STRING_DEFAULT, StaticNetworkInterfaceMetric

logger = logging.getLogger(__name__)

WAN_INTERFACE = "pppoe-wan"

# /proc/net/route flag bits
RTF_UP = 0x1
RTF_GATEWAY = 0x2


def parse_interface_addresses(raw: str) -> dict[str, StaticNetworkInterfaceMetric]:
    """Parse ``ip -o addr show`` output.

    The one-line format keeps the interface name in field 1 and the family
    token in field 2, followed by the address in CIDR notation::

        16: br-lan    inet 192.168.0.1/24 brd 192.168.0.255 scope global br-lan
        16: br-lan    inet6 2408:8000::1/64 scope global dynamic noprefixroute
        16: br-lan    inet6 fe80::8409:9bff:fe6b:79ca/64 scope link

    Everything after the address differs between those three shapes and is
    ignored.
    """
    result: dict[str, StaticNetworkInterfaceMetric] = {}
    for line in raw.splitlines():
        fields = line.split()
        if len(fields) < 4:
            continue
        name, family, address = fields[1], fields[2], trim_subnet_mask(fields[3])
        if family not in ("inet", "inet6"):
            continue

        entry = result.setdefault(name, StaticNetworkInterfaceMetric())
        if family == "inet":
            entry.ipv4.append(address)
        else:
            entry.ipv6.append(address)
    return result


def read_interface_addresses(runner: ProcessRunner) -> dict[str, StaticNetworkInterfaceMetric]:
    try:
        raw = runner.run("ip", "-o", "addr", "show")
    except CommandError:
        return {}
    return parse_interface_addresses(raw)


def read_dns(reader: TextSource, paths: ProcfsPaths) -> list[str]:
    try:
        raw = reader.read_file(paths.resolve("default_dns"))
    except OSError:
        return []
    servers = []
    for line in raw.splitlines():
        fields = line.split()
        if len(fields) >= 2 and fields[0] == "nameserver":
            servers.append(fields[1])
    return servers


def decode_route_address(hex_ip: str) -> str:
    """``"0100A8C0"`` -> ``"192.168.0.1"`` (the kernel prints little-endian)."""
    packed = bytes.fromhex(hex_ip)
    if len(packed) != 4:
        raise ValueError(f"not an IPv4 route address: {hex_ip!r}")
    return ".".join(str(b) for b in reversed(packed))


def read_default_gateway(reader: TextSource, paths: ProcfsPaths) -> str:
    try:
        raw = reader.read_file(paths.resolve("default_gateway"))
    except OSError:
        return STRING_DEFAULT

    # Iface Destination Gateway Flags RefCnt Use Metric Mask MTU Window IRTT
    for line in raw.splitlines():
        fields = line.split()
        if len(fields) < 4 or fields[1] != "00000000":
            continue
        try:
            flags = int(fields[3], 16)
            if not (flags & RTF_UP and flags & RTF_GATEWAY):
                continue
            return decode_route_address(fields[2])
        except ValueError:
            logger.debug("Skipping malformed route line: %r", line)
            continue
    return STRING_DEFAULT


def read_static_network_metric(
    reader: TextSource, runner: ProcessRunner, paths: ProcfsPaths
) -> dict[str, StaticNetworkInterfaceMetric]:
    result = read_interface_addresses(runner)

    wan = result.get(WAN_INTERFACE)
    result["global"] = StaticNetworkInterfaceMetric(
        ipv4=list(wan.ipv4) if wan else [STRING_DEFAULT],
        ipv6=list(wan.ipv6) if wan else [STRING_DEFAULT],
        dns=read_dns(reader, paths),
        gateway=read_default_gateway(reader, paths),
    )
    return result
