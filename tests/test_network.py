"""Tests for interface lookup."""

import socket
from types import SimpleNamespace

import psutil
import pytest

from socks5_proxy.core.network import interface_address, list_interfaces


@pytest.fixture
def fake_interfaces(monkeypatch):
    addrs = {
        "wlan0": [
            SimpleNamespace(family=socket.AF_INET6, address="fe80::1"),
            SimpleNamespace(family=socket.AF_INET, address="192.168.1.20"),
        ],
        "lo": [SimpleNamespace(family=socket.AF_INET, address="127.0.0.1")],
        "eth1": [SimpleNamespace(family=socket.AF_INET, address="10.0.0.5")],
        "tun0": [SimpleNamespace(family=socket.AF_INET6, address="2001:db8::5")],
    }
    stats = {
        "wlan0": SimpleNamespace(isup=True),
        "lo": SimpleNamespace(isup=True),
        "eth1": SimpleNamespace(isup=False),
    }
    monkeypatch.setattr(psutil, "net_if_addrs", lambda: addrs)
    monkeypatch.setattr(psutil, "net_if_stats", lambda: stats)


def test_list_interfaces(fake_interfaces):
    interfaces = list_interfaces()
    assert [iface.name for iface in interfaces] == ["eth1", "lo", "wlan0"]
    lo = interfaces[1]
    assert lo.is_loopback
    assert not interfaces[0].is_up


def test_interface_address(fake_interfaces):
    assert interface_address("wlan0") == "192.168.1.20"


@pytest.mark.parametrize("name", ["eth1", "tun0", "missing0"])
def test_interface_address_unusable(fake_interfaces, name):
    with pytest.raises(LookupError):
        interface_address(name)
