# This file is part of netconverge. See LICENSE file for license information.

from unittest import mock

import pytest

from netconverge.net.addresses import (
    DeferredAddress,
    IPResolutionError,
    IPResolver,
    KnownAddress,
    resolve,
)

M_PATH = "netconverge.net.addresses."

IP_ADDR_OUT = """\
2: eth0    inet 10.0.0.5/24 brd 10.0.0.255 scope global eth0\\       valid_lft forever preferred_lft forever
2: eth0    inet 10.0.0.6/24 brd 10.0.0.255 scope global secondary eth0:0\\       valid_lft forever preferred_lft forever
2: eth0    inet6 2001:db8::5/64 scope global \\       valid_lft forever preferred_lft forever
2: eth0    inet6 fe80::a8bb:ccff:fedd:ee00/64 scope link \\       valid_lft forever preferred_lft forever
"""  # noqa: E501

IP_ADDR_OUT_V6 = """\
3: eth1    inet6 fe80::1/64 scope link \\       valid_lft forever preferred_lft forever
3: eth1    inet6 2001:db8::9/64 scope global dynamic \\       valid_lft 86000sec preferred_lft 14000sec
"""  # noqa: E501


class TestIPResolver:
    @mock.patch(M_PATH + "subp.subp")
    def test_get_ips(self, m_subp):
        m_subp.return_value = (IP_ADDR_OUT, "")
        assert [
            "10.0.0.5",
            "10.0.0.6",
            "2001:db8::5",
            "fe80::a8bb:ccff:fedd:ee00",
        ] == IPResolver().get_ips("eth0")
        m_subp.assert_called_once_with(
            ["ip", "-o", "addr", "show", "dev", "eth0"]
        )

    @mock.patch(M_PATH + "subp.subp")
    def test_alias_is_looked_up_on_parent_device(self, m_subp):
        m_subp.return_value = (IP_ADDR_OUT, "")
        assert "10.0.0.6" in IPResolver().get_ips("eth0:0")
        m_subp.assert_called_once_with(
            ["ip", "-o", "addr", "show", "dev", "eth0"]
        )

    @mock.patch(M_PATH + "subp.subp")
    def test_primary_ip_prefers_ipv4(self, m_subp):
        m_subp.return_value = (IP_ADDR_OUT, "")
        assert "10.0.0.5" == IPResolver().get_primary_ip("eth0")

    @mock.patch(M_PATH + "subp.subp")
    def test_primary_ip_global_ipv6(self, m_subp):
        m_subp.return_value = (IP_ADDR_OUT_V6, "")
        assert "2001:db8::9" == IPResolver().get_primary_ip("eth1")

    @mock.patch(M_PATH + "subp.subp")
    def test_primary_ip_missing(self, m_subp):
        m_subp.return_value = ("", "")
        with pytest.raises(IPResolutionError, match="eth1"):
            IPResolver().get_primary_ip("eth1")


class TestResolve:
    def test_known_address(self):
        resolver = mock.Mock()
        assert "10.0.0.5" == resolve(KnownAddress("eth0", "10.0.0.5"))
        assert [] == resolver.method_calls

    def test_deferred_address_asks_resolver(self):
        resolver = mock.Mock()
        resolver.get_primary_ip.return_value = "10.0.0.9"
        address = DeferredAddress("eth1", resolver)
        assert [] == resolver.method_calls
        assert "10.0.0.9" == resolve(address)
        resolver.get_primary_ip.assert_called_once_with("eth1")
