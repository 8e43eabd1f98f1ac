from __future__ import annotations

import logging

from metrics_api.collectors.paths import ProcfsPaths
from metrics_api.collectors.reader import TextSource
from metrics_api.collectors.runner import CommandError, ProcessRunner
from metrics_api.models.metric import STRING_DEFAULT, StaticSystemMetric, SystemMetric

logger = logging.getLogger(__name__)


def format_uptime(seconds: float) -> str:
    """``196056`` -> ``"2d 6h 27m 36s"``; zero day/hour/minute parts are omitted."""
    second = int(seconds)
    day, second = divmod(second, 86400)
    hour, second = divmod(second, 3600)
    minute, second = divmod(second, 60)

    parts = []
    if day > 0:
        parts.append(f"{day}d")
    if hour > 0:
        parts.append(f"{hour}h")
    if minute > 0:
        parts.append(f"{minute}m")
    parts.append(f"{second}s")
    return " ".join(parts)


def read_system_uptime(reader: TextSource, paths: ProcfsPaths) -> str:
    try:
        raw = reader.read_file(paths.resolve("system_uptime"))
        return format_uptime(float(raw.split()[0]))
    except (OSError, IndexError, ValueError):
        return STRING_DEFAULT


def read_system_metric(reader: TextSource, paths: ProcfsPaths) -> SystemMetric:
    return SystemMetric(uptime=read_system_uptime(reader, paths))


def _run_or_default(runner: ProcessRunner, name: str, *args: str) -> str:
    try:
        return runner.run(name, *args) or STRING_DEFAULT
    except CommandError:
        return STRING_DEFAULT


def read_kernel_version(runner: ProcessRunner) -> str:
    return _run_or_default(runner, "uname", "-r")


def read_system_arch(runner: ProcessRunner) -> str:
    return _run_or_default(runner, "uname", "-m")


def read_local_timezone(reader: TextSource, runner: ProcessRunner, paths: ProcfsPaths) -> str:
    """IANA zone such as ``"Asia/Shanghai"``.

    systemd hosts answer through ``timedatectl``; OpenWrt has no systemd and
    keeps the zone in ``/etc/config/system`` as ``option zonename '...'``.
    """
    try:
        zone = runner.run("timedatectl", "show", "-p", "Timezone", "--value").strip()
        if zone:
            return zone
    except CommandError:
        pass

    try:
        raw = reader.read_file(paths.resolve("system_config"))
    except OSError:
        return STRING_DEFAULT

    result = STRING_DEFAULT
    for line in raw.splitlines():
        fields = line.strip().split(None, 2)
        if len(fields) < 3 or fields[:2] != ["option", "zonename"]:
            continue
        zone = fields[2].strip().strip("'\"")
        if zone:
            result = zone
    return result


def _read_text(reader: TextSource, path: str) -> str:
    try:
        # device-tree strings are NUL terminated
        return reader.read_file(path).replace("\x00", "").strip() or STRING_DEFAULT
    except OSError:
        return STRING_DEFAULT


def read_static_system_metric(reader: TextSource, runner: ProcessRunner, paths: ProcfsPaths) -> StaticSystemMetric:
    return StaticSystemMetric(
        hostname=_read_text(reader, paths.resolve("system_hostname")),
        kernel=read_kernel_version(runner),
        os=_read_text(reader, paths.resolve("system_version")),
        device_name=_read_text(reader, paths.resolve("hardware_name")),
        arch=read_system_arch(runner),
        timezone=read_local_timezone(reader, runner, paths),
    )
