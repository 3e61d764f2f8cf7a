# This file is part of netconverge. See LICENSE file for license information.
"""Per-interface configuration records derived from desired networks."""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from netconverge import net
from netconverge.net.networks import NetworkSpec, Networks, Route

LOG = logging.getLogger(__name__)


class InterfaceConfigurationError(Exception):
    pass


class StaticInterfaceConfig(NamedTuple):
    name: str
    address: str
    netmask: str
    cidr: int
    network: str
    broadcast: str
    is_default_for_gateway: bool
    is_version6: bool
    gateway: str = ""
    mac: str = ""
    post_up_routes: Tuple[Route, ...] = ()


class DHCPInterfaceConfig(NamedTuple):
    name: str
    is_version6: bool = False
    post_up_routes: Tuple[Route, ...] = ()


def sort_by_name(configs: Iterable) -> list:
    """Stable sort of interface configs by interface name."""
    return sorted(configs, key=lambda config: config.name)


def has_version6(configs: Iterable[StaticInterfaceConfig]) -> bool:
    return any(config.is_version6 for config in configs)


class MacAddressDetector:
    def detect_mac_addresses(self) -> Dict[str, str]:
        """Return {mac: interface name} for the host's physical NICs."""
        return net.get_interfaces_by_mac()


class InterfaceConfigurationCreator:
    def create_interface_configurations(
        self, networks: Networks, interfaces_by_mac: Dict[str, str]
    ) -> Tuple[List[StaticInterfaceConfig], List[DHCPInterfaceConfig]]:
        networks = Networks(networks)
        by_mac = {mac.lower(): name for mac, name in interfaces_by_mac.items()}

        # With one network and one interface a missing MAC is unambiguous
        if len(networks) == 1 and len(by_mac) == 1:
            name, network = next(iter(networks.items()))
            if not network.mac:
                networks[name] = network._replace(mac=next(iter(by_mac)))

        for name, network in networks.items():
            if network.mac and network.mac.lower() not in by_mac:
                raise InterfaceConfigurationError(
                    "No device found for network '%s' with MAC address '%s'"
                    % (name, network.mac)
                )

        gateway_network = networks.default_network_for("gateway")
        static_configs = []
        dhcp_configs = []
        for name, network in networks.items():
            ifname = self._interface_name(network, by_mac)
            if not ifname:
                LOG.debug(
                    "Skipping network %s, no interface matches it", name
                )
                continue
            if network.is_dhcp():
                dhcp_configs.append(
                    DHCPInterfaceConfig(
                        name=ifname,
                        is_version6=network.is_version6(),
                        post_up_routes=network.routes,
                    )
                )
            else:
                is_gateway = (
                    gateway_network is not None
                    and gateway_network.name == name
                )
                static_configs.append(
                    self._static_config(ifname, network, is_gateway)
                )
        return static_configs, dhcp_configs

    def _interface_name(
        self, network: NetworkSpec, by_mac: Dict[str, str]
    ) -> Optional[str]:
        if network.alias:
            return network.alias
        if network.mac:
            return by_mac[network.mac.lower()]
        return None

    def _static_config(
        self, ifname: str, network: NetworkSpec, is_default_for_gateway: bool
    ) -> StaticInterfaceConfig:
        is_version6 = network.is_version6()
        try:
            cidr = net.netmask_to_cidr(network.netmask, is_version6)
            network_address = net.prefix_and_ip_to_network_addr(
                cidr, network.ip
            )
            broadcast = ""
            if not is_version6:
                broadcast = net.mask_and_ipv4_to_bcast_addr(
                    str(cidr), network.ip
                )
        except ValueError as e:
            raise InterfaceConfigurationError(
                "Invalid address %s/%s for network '%s': %s"
                % (network.ip, network.netmask, network.name, e)
            ) from e
        return StaticInterfaceConfig(
            name=ifname,
            address=network.ip,
            netmask=network.netmask,
            cidr=cidr,
            network=network_address,
            broadcast=broadcast,
            is_default_for_gateway=is_default_for_gateway,
            is_version6=is_version6,
            gateway=network.gateway,
            mac=network.mac,
            post_up_routes=network.routes,
        )
