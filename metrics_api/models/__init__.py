from .cache import CacheEntry, CacheKey
from .metric import (
    CELSIUS,
    DATA_UNITS,
    PERCENT,
    RATE_UNITS,
    STRING_DEFAULT,
    CpuUsageMetric,
    DynamicMetric,
    MemoryMetric,
    MetricUnit,
    NetworkConnection,
    NetworkConnectionCounts,
    NetworkConnectionMetric,
    NetworkIoMetric,
    StaticMetric,
    StaticNetworkInterfaceMetric,
    StaticSystemMetric,
    StorageIoMetric,
    SystemMetric,
)
from .snapshot import CpuSnap, CpuSnapUnit, DiskSnap, DiskSnapUnit, NetSnap, NetSnapUnit

__all__ = [
    "CacheEntry",
    "CacheKey",
    "CELSIUS",
    "DATA_UNITS",
    "PERCENT",
    "RATE_UNITS",
    "STRING_DEFAULT",
    "CpuUsageMetric",
    "DynamicMetric",
    "MemoryMetric",
    "MetricUnit",
    "NetworkConnection",
    "NetworkConnectionCounts",
    "NetworkConnectionMetric",
    "NetworkIoMetric",
    "StaticMetric",
    "StaticNetworkInterfaceMetric",
    "StaticSystemMetric",
    "StorageIoMetric",
    "SystemMetric",
    "CpuSnap",
    "CpuSnapUnit",
    "DiskSnap",
    "DiskSnapUnit",
    "NetSnap",
    "NetSnapUnit",
]
