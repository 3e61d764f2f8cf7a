# This file is part of netconverge. See LICENSE file for license information.
"""Interface addresses handed to validation and ARP broadcasting.

A static interface's address is known when its config is written. A DHCP
interface's address only exists once the client has a lease, so it is
carried as a DeferredAddress and looked up when it is needed.
"""

import logging
import re
from typing import Dict, List, NamedTuple, Union

from netconverge import subp

LOG = logging.getLogger(__name__)

IP_ADDR_LINE = re.compile(
    r"^\d+:\s+(?P<dev>\S+)\s+(?P<family>inet6?)\s+(?P<ip>[^/\s]+)"
    r"(/\d+)?.*\sscope\s(?P<scope>\S+)"
)


class IPResolutionError(Exception):
    pass


def _ip_addr_show(ifname: str) -> List[Dict[str, str]]:
    """Addresses of ifname as parsed from 'ip -o addr show dev'."""
    # aliases such as eth0:0 are labels on their parent device
    device = ifname.split(":", 1)[0]
    out, _err = subp.subp(["ip", "-o", "addr", "show", "dev", device])
    addrs = []
    for num, line in enumerate(out.splitlines()):
        m = IP_ADDR_LINE.match(line)
        if not m:
            LOG.debug("Could not parse ip addr show: (line:%d) %s", num, line)
            continue
        addrs.append(m.groupdict())
    return addrs


class IPResolver:
    def get_ips(self, ifname: str) -> List[str]:
        return [addr["ip"] for addr in _ip_addr_show(ifname)]

    def get_primary_ip(self, ifname: str) -> str:
        """First global IPv4 address of ifname, else first global IPv6."""
        global_addrs = [
            addr for addr in _ip_addr_show(ifname) if addr["scope"] == "global"
        ]
        for family in ("inet", "inet6"):
            for addr in global_addrs:
                if addr["family"] == family:
                    return addr["ip"]
        raise IPResolutionError(
            "No global address found on interface '%s'" % ifname
        )


class KnownAddress(NamedTuple):
    interface_name: str
    ip: str


class DeferredAddress(NamedTuple):
    interface_name: str
    resolver: IPResolver


InterfaceAddress = Union[KnownAddress, DeferredAddress]


def resolve(address: InterfaceAddress) -> str:
    """Return the IP of address, asking the resolver only when deferred."""
    if isinstance(address, DeferredAddress):
        return address.resolver.get_primary_ip(address.interface_name)
    return address.ip
