# This file is part of netconverge. See LICENSE file for license information.

import pytest

from netconverge.net import networkd
from netconverge.net.interfaces import (
    DHCPInterfaceConfig,
    StaticInterfaceConfig,
)
from netconverge.net.networks import Route


def static_config(**kwargs):
    values = dict(
        name="eth0",
        address="10.0.0.5",
        netmask="255.255.255.0",
        cidr=24,
        network="10.0.0.0",
        broadcast="10.0.0.255",
        is_default_for_gateway=True,
        is_version6=False,
        gateway="10.0.0.1",
    )
    values.update(kwargs)
    return StaticInterfaceConfig(**values)


class TestNetworkdUnit:
    def test_empty_sections_are_omitted(self):
        unit = networkd.NetworkdUnit()
        unit.add_section("Match").append(("Name", "eth0"))
        unit.add_section("Network")
        unit.add_section("Route").append(("Gateway", "10.0.0.1"))
        assert (
            "# Generated by netconverge\n"
            "[Match]\nName=eth0\n\n[Route]\nGateway=10.0.0.1\n"
        ) == unit.dumps()

    def test_no_header(self):
        unit = networkd.NetworkdUnit(header="")
        unit.add_section("Match").append(("Name", "eth0"))
        assert "[Match]\nName=eth0\n" == unit.dumps()


class TestRenderStaticInterface:
    def test_default_gateway_interface(self):
        expected = (
            "# Generated by netconverge\n"
            "[Match]\n"
            "Name=eth0\n"
            "\n"
            "[Address]\n"
            "Address=10.0.0.5/24\n"
            "Broadcast=10.0.0.255\n"
            "\n"
            "[Network]\n"
            "Gateway=10.0.0.1\n"
            "DNS=8.8.8.8\n"
        )
        assert expected == networkd.render_static_interface(
            static_config(), ["8.8.8.8"]
        )

    def test_gateway_only_on_default_gateway_interface(self):
        rendered = networkd.render_static_interface(
            static_config(is_default_for_gateway=False), []
        )
        assert "Gateway=" not in rendered
        assert "[Network]" not in rendered

    def test_dns_order_is_kept(self):
        rendered = networkd.render_static_interface(
            static_config(), ["9.9.9.9", "1.1.1.1", "8.8.8.8"]
        )
        assert rendered.endswith("DNS=9.9.9.9\nDNS=1.1.1.1\nDNS=8.8.8.8\n")

    def test_ipv6(self):
        config = static_config(
            address="2001:db8::5",
            netmask="64",
            cidr=64,
            network="2001:db8::",
            broadcast="",
            is_default_for_gateway=False,
            is_version6=True,
        )
        expected = (
            "# Generated by netconverge\n"
            "[Match]\n"
            "Name=eth0\n"
            "\n"
            "[Address]\n"
            "Address=2001:db8::5/64\n"
            "\n"
            "[Network]\n"
            "IPv6AcceptRA=true\n"
        )
        assert expected == networkd.render_static_interface(config, [])

    def test_routes(self):
        config = static_config(
            post_up_routes=(
                Route("10.1.0.0", "255.255.0.0", "10.0.0.254"),
                Route("10.2.0.0", "24", "10.0.0.253"),
            )
        )
        rendered = networkd.render_static_interface(config, [])
        assert rendered.endswith(
            "[Route]\n"
            "Destination=10.1.0.0/16\n"
            "Gateway=10.0.0.254\n"
            "\n"
            "[Route]\n"
            "Destination=10.2.0.0/24\n"
            "Gateway=10.0.0.253\n"
        )

    def test_invalid_route_netmask(self):
        config = static_config(
            post_up_routes=(Route("10.1.0.0", "255.0.255.0", "10.0.0.254"),)
        )
        with pytest.raises(ValueError):
            networkd.render_static_interface(config, [])

    def test_rendering_is_deterministic(self):
        config = static_config()
        assert networkd.render_static_interface(
            config, ["8.8.8.8"]
        ) == networkd.render_static_interface(config, ["8.8.8.8"])


class TestRenderDynamicInterface:
    def test_dhcp(self):
        expected = (
            "# Generated by netconverge\n"
            "[Match]\n"
            "Name=eth1\n"
            "\n"
            "[Network]\n"
            "DHCP=yes\n"
            "DNS=8.8.8.8\n"
            "DNS=1.1.1.1\n"
        )
        assert expected == networkd.render_dynamic_interface(
            DHCPInterfaceConfig("eth1"), ["8.8.8.8", "1.1.1.1"]
        )

    def test_dhcp_ipv6_with_route(self):
        config = DHCPInterfaceConfig(
            "eth1",
            is_version6=True,
            post_up_routes=(Route("2001:db8:1::", "48", "2001:db8::1"),),
        )
        expected = (
            "# Generated by netconverge\n"
            "[Match]\n"
            "Name=eth1\n"
            "\n"
            "[Network]\n"
            "DHCP=yes\n"
            "IPv6AcceptRA=true\n"
            "\n"
            "[Route]\n"
            "Destination=2001:db8:1::/48\n"
            "Gateway=2001:db8::1\n"
        )
        assert expected == networkd.render_dynamic_interface(config, [])
