"""Tests for metrics_api.collectors.system."""

from __future__ import annotations

import pytest

from metrics_api.collectors.runner import CommandError
from metrics_api.collectors.system import (
    format_uptime,
    read_local_timezone,
    read_static_system_metric,
    read_system_metric,
    read_system_uptime,
)

TIMEDATECTL = ("timedatectl", "show", "-p", "Timezone", "--value")

UCI_SYSTEM = """\
config system
\toption hostname 'OpenWrt'
\toption timezone 'CST-8'
\toption zonename 'Asia/Shanghai'
\toption ttylogin '0'

config timeserver 'ntp'
\tlist server '0.openwrt.pool.ntp.org'
"""


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (196056.42, "2d 6h 27m 36s"),
        (3600, "1h 0s"),
        (59.9, "59s"),
        (0, "0s"),
        (86400 + 61, "1d 1m 1s"),
    ],
)
def test_format_uptime(seconds, expected):
    assert format_uptime(seconds) == expected


class TestUptime:
    def test_reads_first_column(self, paths, make_reader):
        reader = make_reader({"/proc/uptime": "196056.42 380000.00"})
        assert read_system_uptime(reader, paths) == "2d 6h 27m 36s"

    def test_missing_file(self, paths, reader):
        assert read_system_metric(reader, paths).uptime == "unknown"

    def test_garbage(self, paths, make_reader):
        assert read_system_uptime(make_reader({"/proc/uptime": "soon"}), paths) == "unknown"


class TestTimezone:
    def test_timedatectl(self, paths, reader, make_runner):
        runner = make_runner({TIMEDATECTL: "Europe/Berlin\n"})
        assert read_local_timezone(reader, runner, paths) == "Europe/Berlin"

    def test_falls_back_to_uci_config(self, paths, make_reader, runner):
        reader = make_reader({"/etc/config/system": UCI_SYSTEM})
        assert read_local_timezone(reader, runner, paths) == "Asia/Shanghai"

    def test_timedatectl_failure_falls_back(self, paths, make_reader, make_runner):
        reader = make_reader({"/etc/config/system": "option zonename \"UTC\""})
        runner = make_runner({TIMEDATECTL: CommandError("no systemd")})
        assert read_local_timezone(reader, runner, paths) == "UTC"

    def test_nothing_available(self, paths, reader, runner):
        assert read_local_timezone(reader, runner, paths) == "unknown"

    def test_config_without_zonename(self, paths, make_reader, runner):
        reader = make_reader({"/etc/config/system": "config system\n\toption hostname 'x'"})
        assert read_local_timezone(reader, runner, paths) == "unknown"


def test_read_static_system_metric(paths, make_reader, make_runner):
    reader = make_reader(
        {
            "/proc/sys/kernel/hostname": "OpenWrt\n",
            "/proc/version": "Linux version 6.6.52 (builder@buildhost) #0 SMP",
            "/proc/device-tree/model": "FriendlyElec NanoPi R4S\x00",
            "/etc/config/system": UCI_SYSTEM,
        }
    )
    runner = make_runner({("uname", "-r"): "6.6.52\n", ("uname", "-m"): "aarch64"})

    metric = read_static_system_metric(reader, runner, paths)

    assert metric.hostname == "OpenWrt"
    assert metric.kernel == "6.6.52"
    assert metric.os.startswith("Linux version 6.6.52")
    assert metric.device_name == "FriendlyElec NanoPi R4S"
    assert metric.arch == "aarch64"
    assert metric.timezone == "Asia/Shanghai"


def test_read_static_system_metric_defaults(paths, reader, runner):
    metric = read_static_system_metric(reader, runner, paths)

    assert metric.model_dump() == {
        "hostname": "unknown",
        "kernel": "unknown",
        "os": "unknown",
        "device_name": "unknown",
        "arch": "unknown",
        "timezone": "unknown",
    }
