# This file is part of netconverge. See LICENSE file for license information.
"""Desired network settings, one NetworkSpec per named network."""

import logging
from collections import OrderedDict
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from netconverge.net import is_ipv6_address

LOG = logging.getLogger(__name__)


class NetworkType(Enum):
    DYNAMIC = "dynamic"
    MANUAL = "manual"
    VIP = "vip"

    def __str__(self):  # pylint: disable=invalid-str-returned
        return self.value


class Route(NamedTuple):
    destination: str
    netmask: str
    gateway: str


class NetworkSpec(NamedTuple):
    name: str
    type: NetworkType = NetworkType.MANUAL
    ip: str = ""
    netmask: str = ""
    gateway: str = ""
    routes: Tuple[Route, ...] = ()
    dns: Tuple[str, ...] = ()
    default: Tuple[str, ...] = ()
    mac: str = ""
    alias: str = ""
    preconfigured: bool = False
    use_dhcp: bool = False

    def is_vip(self) -> bool:
        return self.type == NetworkType.VIP

    def is_dynamic(self) -> bool:
        return self.type == NetworkType.DYNAMIC

    def is_dhcp(self) -> bool:
        if self.is_vip():
            return False
        if self.is_dynamic() or self.use_dhcp:
            return True
        # A manual network without an address cannot be configured
        # statically.
        return not self.ip

    def is_default_for(self, category: str) -> bool:
        return category in self.default

    def is_version6(self) -> bool:
        return is_ipv6_address(self.ip)

    @property
    def version(self) -> int:
        return 6 if self.is_version6() else 4


class Networks(OrderedDict):
    """Mapping of network name to NetworkSpec."""

    def is_preconfigured(self) -> bool:
        """True when every interface-bound network is managed externally."""
        return all(
            network.preconfigured
            for network in self.values()
            if not network.is_vip()
        )

    def default_network_for(self, category: str) -> Optional[NetworkSpec]:
        if len(self) == 1:
            return next(iter(self.values()))
        for name in sorted(self):
            if self[name].is_default_for(category):
                return self[name]
        return None

    def dns_servers(self) -> Tuple[str, ...]:
        """DNS servers of the DNS default network, in declared order."""
        network = self.default_network_for("dns")
        if network is None:
            return ()
        return network.dns

    def non_vip(self) -> "Networks":
        return Networks(
            (name, network)
            for name, network in self.items()
            if not network.is_vip()
        )


def _parse_route(route: dict) -> Route:
    return Route(
        destination=route.get("destination", ""),
        netmask=str(route.get("netmask", "")),
        gateway=route.get("gateway", ""),
    )


def parse_network(name: str, cfg: dict) -> NetworkSpec:
    return NetworkSpec(
        name=name,
        type=NetworkType(cfg.get("type", NetworkType.MANUAL.value)),
        ip=cfg.get("ip") or "",
        netmask=str(cfg.get("netmask") or ""),
        gateway=cfg.get("gateway") or "",
        routes=tuple(_parse_route(r) for r in cfg.get("routes") or []),
        dns=tuple(cfg.get("dns") or []),
        default=tuple(cfg.get("default") or []),
        mac=cfg.get("mac") or "",
        alias=cfg.get("alias") or "",
        preconfigured=bool(cfg.get("preconfigured", False)),
        use_dhcp=bool(cfg.get("use_dhcp", False)),
    )


def parse_networks(settings: dict) -> Networks:
    """Build Networks from the 'networks' mapping of a settings document."""
    networks = Networks()
    for name, cfg in (settings.get("networks") or {}).items():
        networks[name] = parse_network(name, cfg or {})
        LOG.debug("Parsed network %s: %s", name, networks[name])
    return networks
