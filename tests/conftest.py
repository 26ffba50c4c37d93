"""Shared fixtures for netdiagram tests."""

import csv
from pathlib import Path

import pytest

from netdiagram.models import NetworkNode


def make_node(node_id, parents=(), name=None, vlan=None, note="", ip="", order=0):
    return NetworkNode(
        id=node_id,
        name=name or node_id,
        ip=ip,
        vlan=vlan,
        note=note,
        parents=tuple(parents),
        source_order=order,
    )


@pytest.fixture
def node():
    """Factory for NetworkNode instances with sensible defaults."""
    return make_node


@pytest.fixture
def nodes_of():
    """Build an ordered node set from NetworkNode instances."""
    def _nodes_of(*items):
        return {item.id: item for item in items}
    return _nodes_of


@pytest.fixture
def sample_rows():
    """Connection table rows including the header, as exported from the sheet."""
    return [
        ["接続元ID(自動: カンマ区切り)", "ID（自動）", "ID（選択）", "機器名", "IPアドレス", "VLANID", "備考"],
        ["", "ONU", "", "ONU", "", "", ""],
        ["ONU", "RT1", "", "Router", "192.168.1.1", "", "main router"],
        ["RT1", "SW1", "", "Switch 1", "192.168.1.2", "VLAN10", ""],
        ["RT1", "SW2", "", "Switch 2", "", "20", ""],
        ["SW1,SW2", "AP1", "", "Access point", "", "10", "dual-homed"],
    ]


@pytest.fixture
def sample_csv(tmp_path, sample_rows) -> Path:
    """Sample connection table written as a UTF-8 (BOM) CSV file."""
    path = tmp_path / "network.csv"
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        csv.writer(f).writerows(sample_rows)
    return path
