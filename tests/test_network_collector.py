"""Tests for metrics_api.collectors.network."""

from __future__ import annotations

import pytest

from metrics_api.collectors.network import read_network_metric
from metrics_api.models import NetSnap, NetSnapUnit

NET_DEV = "/proc/net/dev"

HEADER = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
"""


def _dev(**interfaces: tuple[int, int]) -> str:
    lines = [HEADER.rstrip("\n")]
    for name, (rx, tx) in interfaces.items():
        lines.append(f"{name.replace('_', '-'):>6}: {rx} 100 0 0 0 0 0 0 {tx} 50 0 0 0 0 0 0")
    return "\n".join(lines)


class TestReadNetworkMetric:
    def test_first_sample_reports_zero(self, paths, make_reader):
        reader = make_reader({NET_DEV: _dev(lo=(1000, 1000), eth0=(5_000_000, 2_000_000))})
        snap = NetSnap()

        metric = read_network_metric(reader, paths, snap, 1)

        assert set(metric) == {"eth0", "total"}
        assert metric["eth0"].incoming.value == 0
        assert metric["eth0"].incoming.unit == "B/S"
        assert snap.interfaces["eth0"] == NetSnapUnit(rx_bytes=5_000_000, tx_bytes=2_000_000)
        assert "lo" not in snap.interfaces

    def test_rates_and_total(self, paths, make_reader):
        reader = make_reader({NET_DEV: _dev(eth0=(5_000_000, 2_000_000), br_lan=(1_000_000, 500_000))})
        snap = NetSnap()
        read_network_metric(reader, paths, snap, 2)

        reader.files[NET_DEV] = _dev(eth0=(7_000_000, 2_100_000), br_lan=(1_000_500, 400_000))
        metric = read_network_metric(reader, paths, snap, 2)

        assert (metric["eth0"].incoming.value, metric["eth0"].incoming.unit) == (1.0, "MB/S")
        assert (metric["eth0"].outgoing.value, metric["eth0"].outgoing.unit) == (50.0, "KB/S")
        assert (metric["br-lan"].incoming.value, metric["br-lan"].incoming.unit) == (250.0, "B/S")
        # counter went backwards: treated as a reset
        assert metric["br-lan"].outgoing.value == 0
        assert metric["total"].incoming.value == pytest.approx(1.00025)
        assert metric["total"].incoming.unit == "MB/S"
        assert (metric["total"].outgoing.value, metric["total"].outgoing.unit) == (50.0, "KB/S")

    def test_skips_loopback_aliases_and_malformed_lines(self, paths, make_reader):
        raw = _dev(loopback0=(10, 10), eth1=(10, 10)) + "\n  bad0: 1 2 3\n"
        reader = make_reader({NET_DEV: raw})

        metric = read_network_metric(reader, paths, NetSnap(), 1)

        assert set(metric) == {"eth1", "total"}

    def test_unreadable_file_yields_total_only(self, paths, reader):
        snap = NetSnap()

        metric = read_network_metric(reader, paths, snap, 1)

        assert list(metric) == ["total"]
        assert metric["total"].incoming.value == 0
        assert snap.sampled_at is not None
