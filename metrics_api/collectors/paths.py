from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ProcfsPaths(BaseModel):
    """Kernel and system files read by the parsers.

    ``prefix`` is prepended to every path, which lets tests (or a chroot-style
    mirror of another device) point the whole table at a fake tree.
    """

    prefix: str = ""

    cpu_temp: str = "/sys/class/thermal/thermal_zone0/temp"
    cpu_usage: str = "/proc/stat"
    system_uptime: str = "/proc/uptime"
    default_dns: str = "/tmp/resolv.conf.ppp"
    default_gateway: str = "/proc/net/route"
    storage_device_mounts: str = "/proc/mounts"
    storage_device_io: str = "/proc/diskstats"
    network_device_io: str = "/proc/net/dev"
    system_memory_info: str = "/proc/meminfo"
    network_connection: list[str] = ["/proc/net/nf_conntrack", "/proc/net/ip_conntrack"]
    system_version: str = "/proc/version"
    hardware_name: str = "/proc/device-tree/model"
    system_hostname: str = "/proc/sys/kernel/hostname"
    system_config: str = "/etc/config/system"

    def resolve(self, name: str) -> str:
        return self.prefix + getattr(self, name)

    def resolve_all(self, name: str) -> list[str]:
        return [self.prefix + p for p in getattr(self, name)]

    @classmethod
    def from_yaml(cls, path: str | Path, prefix: str = "") -> ProcfsPaths:
        """Load overrides from a YAML mapping of field name to path."""
        raw = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring path table %s: expected a mapping", path)
            raw = {}
        overrides = {k: v for k, v in raw.items() if k in cls.model_fields}
        for unknown in set(raw) - set(overrides):
            logger.warning("Ignoring unknown path entry: %s", unknown)
        overrides.setdefault("prefix", prefix)
        return cls(**overrides)
