# This file is part of netconverge. See LICENSE file for license information.

from unittest import mock

import pytest

from netconverge import subp
from netconverge.net import dhcp

M_PATH = "netconverge.net.dhcp."


class TestRenderDhclientConf:
    def test_without_dns(self):
        rendered = dhcp.render_dhclient_conf([])
        assert rendered.startswith("# Generated by netconverge\n\n")
        assert rendered.endswith(dhcp.DHCLIENT_PREAMBLE)
        assert "prepend" not in rendered

    def test_single_prepend_line_in_order(self):
        rendered = dhcp.render_dhclient_conf(
            ["9.9.9.9", "8.8.8.8", "1.1.1.1"]
        )
        assert 1 == rendered.count("prepend")
        assert rendered.endswith(
            "\nprepend domain-name-servers 9.9.9.9, 8.8.8.8, 1.1.1.1;\n"
        )

    def test_requests_classless_static_routes(self):
        assert (
            "option rfc3442-classless-static-routes code 121"
            in dhcp.render_dhclient_conf([])
        )


class TestCommands:
    @mock.patch(M_PATH + "subp.subp")
    def test_kill_dhcp_client(self, m_subp):
        dhcp.kill_dhcp_client()
        assert [
            mock.call(["pkill", "dhclient"], rcs=[0, 1])
        ] == m_subp.call_args_list

    @mock.patch(M_PATH + "subp.subp")
    def test_delete_resolvconf_record(self, m_subp):
        dhcp.delete_resolvconf_record("eth0")
        assert [
            mock.call(["resolvconf", "-d", "eth0.dhclient"])
        ] == m_subp.call_args_list

    @mock.patch(M_PATH + "subp.subp")
    def test_failures_propagate(self, m_subp):
        m_subp.side_effect = subp.ProcessExecutionError(exit_code=2)
        with pytest.raises(subp.ProcessExecutionError):
            dhcp.kill_dhcp_client()
