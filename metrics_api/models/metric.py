from __future__ import annotations

from pydantic import BaseModel, Field

STRING_DEFAULT = "unknown"

B_SECOND = "B/S"
KB_SECOND = "KB/S"
MB_SECOND = "MB/S"
GB_SECOND = "GB/S"
TB_SECOND = "TB/S"
PB_SECOND = "PB/S"

BYTE = "B"
KILO_BYTE = "KB"
MEGA_BYTE = "MB"
GIGA_BYTE = "GB"
TERA_BYTE = "TB"
PETA_BYTE = "PB"

PERCENT = "%"
CELSIUS = "°C"

RATE_UNITS: tuple[str, ...] = (B_SECOND, KB_SECOND, MB_SECOND, GB_SECOND, TB_SECOND, PB_SECOND)
DATA_UNITS: tuple[str, ...] = (BYTE, KILO_BYTE, MEGA_BYTE, GIGA_BYTE, TERA_BYTE, PETA_BYTE)


class MetricUnit(BaseModel):
    """A scaled quantity as published to the dashboard."""

    value: float
    unit: str


def _unknown(unit: str = "") -> MetricUnit:
    return MetricUnit(value=-1, unit=unit)


# ── dynamic ───────────────────────────────────────────


class CpuUsageMetric(BaseModel):
    usage: MetricUnit
    temperature: MetricUnit


class NetworkIoMetric(BaseModel):
    incoming: MetricUnit
    outgoing: MetricUnit


class StorageIoMetric(BaseModel):
    """Per-device I/O rates and capacity; unknown fields carry ``-1``."""

    read: MetricUnit = Field(default_factory=_unknown)
    write: MetricUnit = Field(default_factory=_unknown)
    total: MetricUnit = Field(default_factory=_unknown)
    used: MetricUnit = Field(default_factory=_unknown)
    used_percent: MetricUnit = Field(default_factory=lambda: _unknown(PERCENT))


class MemoryMetric(BaseModel):
    total: MetricUnit = Field(default_factory=lambda: _unknown(KILO_BYTE))
    used: MetricUnit = Field(default_factory=lambda: _unknown(KILO_BYTE))
    used_percent: MetricUnit = Field(default_factory=lambda: _unknown(PERCENT))


class SystemMetric(BaseModel):
    uptime: str = STRING_DEFAULT


class DynamicMetric(BaseModel):
    """Document served at ``/metric/dynamic``."""

    storage: dict[str, StorageIoMetric] = Field(default_factory=dict)
    cpu: dict[str, CpuUsageMetric] = Field(default_factory=dict)
    network: dict[str, NetworkIoMetric] = Field(default_factory=dict)
    memory: MemoryMetric = Field(default_factory=MemoryMetric)
    system: SystemMetric = Field(default_factory=SystemMetric)


# ── static ────────────────────────────────────────────


class StaticNetworkInterfaceMetric(BaseModel):
    ipv4: list[str] = Field(default_factory=list)
    ipv6: list[str] = Field(default_factory=list)
    # only the "global" entry carries these
    dns: list[str] | None = None
    gateway: str | None = None


class StaticSystemMetric(BaseModel):
    hostname: str = STRING_DEFAULT
    kernel: str = STRING_DEFAULT
    os: str = STRING_DEFAULT
    device_name: str = STRING_DEFAULT
    arch: str = STRING_DEFAULT
    timezone: str = STRING_DEFAULT


class StaticMetric(BaseModel):
    """Document served at ``/metric/static``."""

    network: dict[str, StaticNetworkInterfaceMetric] = Field(default_factory=dict)
    system: StaticSystemMetric = Field(default_factory=StaticSystemMetric)


# ── network connections ──────────────────────────────


class NetworkConnectionCounts(BaseModel):
    """Number of tracked flows per protocol (one per conntrack entry)."""

    tcp: int = 0
    udp: int = 0
    other: int = 0

    def add(self, protocol: str) -> None:
        if protocol == "tcp":
            self.tcp += 1
        elif protocol == "udp":
            self.udp += 1
        else:
            self.other += 1


class NetworkConnection(BaseModel):
    """One directional leg (origin or reply) of a tracked flow."""

    ip_family: str
    source_ip: str
    source_port: int
    destination_ip: str
    destination_port: int
    protocol: str
    state: str
    traffic: MetricUnit
    packets: int


class NetworkConnectionMetric(BaseModel):
    """Document served at ``/metric/network_connection``."""

    counts: NetworkConnectionCounts = Field(default_factory=NetworkConnectionCounts)
    connections: list[NetworkConnection] = Field(default_factory=list)
