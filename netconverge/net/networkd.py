# This file is part of netconverge. See LICENSE file for license information.

from typing import List, Sequence, Tuple, Union

from netconverge import settings
from netconverge.net import netmask_to_cidr
from netconverge.net.interfaces import (
    DHCPInterfaceConfig,
    StaticInterfaceConfig,
)


class NetworkdUnit:
    """Sections of a systemd-networkd .network unit, in insertion order.

    A section name may repeat ([Route] once per route). Entries keep the
    order they were added in, so DNS servers stay in priority order.
    """

    def __init__(self, header: str = settings.GENERATED_HEADER):
        self.header = header
        self.sections: List[Tuple[str, List[Tuple[str, str]]]] = []

    def add_section(self, name: str) -> List[Tuple[str, str]]:
        entries: List[Tuple[str, str]] = []
        self.sections.append((name, entries))
        return entries

    def dumps(self) -> str:
        blocks = []
        for name, entries in self.sections:
            if not entries:
                continue
            lines = ["[%s]" % name]
            lines.extend("%s=%s" % (key, value) for key, value in entries)
            blocks.append("\n".join(lines) + "\n")
        contents = "\n".join(blocks)
        if self.header:
            contents = self.header + "\n" + contents
        return contents


def _add_match(unit: NetworkdUnit, name: str):
    unit.add_section("Match").append(("Name", name))


def _add_ipv6_and_dns(
    network: List[Tuple[str, str]],
    is_version6: bool,
    dns_servers: Sequence[str],
):
    if is_version6:
        network.append(("IPv6AcceptRA", "true"))
    for server in dns_servers:
        network.append(("DNS", server))


def _add_routes(
    unit: NetworkdUnit,
    config: Union[StaticInterfaceConfig, DHCPInterfaceConfig],
):
    for route in config.post_up_routes:
        cidr = netmask_to_cidr(route.netmask, config.is_version6)
        section = unit.add_section("Route")
        section.append(("Destination", "%s/%s" % (route.destination, cidr)))
        section.append(("Gateway", route.gateway))


def render_static_interface(
    config: StaticInterfaceConfig, dns_servers: Sequence[str]
) -> str:
    unit = NetworkdUnit()
    _add_match(unit, config.name)

    address = unit.add_section("Address")
    address.append(("Address", "%s/%s" % (config.address, config.cidr)))
    if not config.is_version6:
        address.append(("Broadcast", config.broadcast))

    network = unit.add_section("Network")
    if config.is_default_for_gateway and config.gateway:
        network.append(("Gateway", config.gateway))
    _add_ipv6_and_dns(network, config.is_version6, dns_servers)

    _add_routes(unit, config)
    return unit.dumps()


def render_dynamic_interface(
    config: DHCPInterfaceConfig, dns_servers: Sequence[str]
) -> str:
    unit = NetworkdUnit()
    _add_match(unit, config.name)

    network = unit.add_section("Network")
    network.append(("DHCP", "yes"))
    _add_ipv6_and_dns(network, config.is_version6, dns_servers)

    _add_routes(unit, config)
    return unit.dumps()
