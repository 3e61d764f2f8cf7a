# This file is part of netconverge. See LICENSE file for license information.

import errno
import ipaddress
import logging
import os
import re
from typing import Callable, Dict, List, Tuple, Union

from netconverge import util

LOG = logging.getLogger(__name__)
SYS_CLASS_NET = "/sys/class/net/"


def get_sys_class_path():
    """Simple function to return the global SYS_CLASS_NET."""
    return SYS_CLASS_NET


def sys_dev_path(devname, path=""):
    return get_sys_class_path() + devname + "/" + path


def read_sys_net(devname, path, on_enoent=None):
    dev_path = sys_dev_path(devname, path)
    try:
        contents = util.load_text_file(dev_path)
    except OSError as e:
        if e.errno in (errno.ENOENT, errno.ENOTDIR, errno.EINVAL):
            if on_enoent is not None:
                return on_enoent(e)
        raise
    return contents.strip()


def read_sys_net_safe(iface, field):
    return read_sys_net(iface, field, on_enoent=lambda e: False)


def read_sys_net_int(iface, field):
    val = read_sys_net_safe(iface, field)
    if val is False:
        return None
    try:
        return int(val)
    except ValueError:
        return None


def is_bridge(devname):
    return os.path.exists(sys_dev_path(devname, "bridge"))


def is_bond(devname):
    return os.path.exists(sys_dev_path(devname, "bonding"))


def is_vlan(devname):
    uevent = str(read_sys_net_safe(devname, "uevent"))
    return "DEVTYPE=vlan" in uevent.splitlines()


def interface_has_own_mac(ifname):
    """return True if the provided interface has its own address.

    Based on addr_assign_type in /sys.  Return true for any interface
    that does not have a 'stolen' address. Examples of such devices
    are bonds or vlans that inherit their mac from another device.
    Possible values are:
      0: permanent address    2: stolen from another device
      1: randomly generated   3: set using dev_set_mac_address"""
    assign_type = read_sys_net_int(ifname, "addr_assign_type")
    if assign_type is None:
        return True
    return assign_type in (0, 1, 3)


def get_interface_mac(ifname):
    """Returns the string value of an interface's MAC Address"""
    path = "address"
    if os.path.isdir(sys_dev_path(ifname, "bonding_slave")):
        # for a bond slave, get the nic's hwaddress, not the address it
        # is using because its part of a bond.
        path = "bonding_slave/perm_hwaddr"
    return read_sys_net_safe(ifname, path)


def get_devicelist() -> List[str]:
    try:
        devs = os.listdir(get_sys_class_path())
    except FileNotFoundError:
        devs = []
    return sorted(devs)


def get_interfaces() -> List[Tuple[str, str]]:
    """Return list of interface tuples (name, mac).

    Bridges, bonds, vlans, loopback and any devices that have a 'stolen'
    or zero mac are excluded."""
    ret = []
    # 16 somewhat arbitrarily chosen.  Normally a mac is 6 '00:' tokens.
    zero_mac = ":".join(("00",) * 16)
    for name in get_devicelist():
        if name == "lo":
            continue
        if not interface_has_own_mac(name):
            continue
        if is_bridge(name) or is_bond(name) or is_vlan(name):
            LOG.debug("Ignoring non-physical interface: %s", name)
            continue
        mac = get_interface_mac(name)
        # some devices may not have a mac (tun0)
        if not mac or mac == zero_mac[: len(mac)]:
            continue
        ret.append((name, mac))
    return ret


def get_interfaces_by_mac() -> Dict[str, str]:
    """Build a dictionary of {mac: name}."""
    ret: Dict[str, str] = {}
    for name, mac in get_interfaces():
        if mac in ret:
            raise RuntimeError(
                "duplicate mac found! both '%s' and '%s' have mac '%s'."
                % (name, ret[mac], mac)
            )
        ret[mac] = name
    return ret


def maybe_get_address(convert_to_address: Callable, address: str, **kwargs):
    """Use a function to return an address. If conversion throws a ValueError
    exception return False.
    """
    try:
        return convert_to_address(address, **kwargs)
    except ValueError:
        return False


def is_ipv6_address(address: str) -> bool:
    return bool(maybe_get_address(ipaddress.IPv6Address, address))


def ipv4_mask_to_net_prefix(mask) -> int:
    """Convert an ipv4 netmask into a network prefix length.

    If the input is already an integer or a string representation of
    an integer, then int(mask) will be returned.
       "255.255.255.0" => 24
       str(24)         => 24
       "24"            => 24
    """
    return ipaddress.ip_network(f"0.0.0.0/{mask}").prefixlen


def ipv6_mask_to_net_prefix(mask) -> int:
    """Convert an ipv6 netmask (very uncommon) or prefix (64) to prefix.

       "ffff:ffff:ffff::"  => 48
       "48"                => 48
    """
    try:
        # In the case the mask is already a prefix
        return ipaddress.ip_network(f"::/{mask}").prefixlen
    except ValueError:
        pass

    mask_int = int(ipaddress.ip_address(mask))
    if mask_int == 0:
        return mask_int

    trailing_zeroes = min(
        ipaddress.IPV6LENGTH, (~mask_int & (mask_int - 1)).bit_length()
    )
    leading_ones = mask_int >> trailing_zeroes
    prefixlen = ipaddress.IPV6LENGTH - trailing_zeroes
    all_ones = (1 << prefixlen) - 1
    if leading_ones != all_ones:
        raise ValueError("Invalid network mask '%s'" % mask)

    return prefixlen


def netmask_to_cidr(netmask: Union[str, int], is_version6: bool) -> int:
    """Prefix width of netmask, parsed as the given IP version."""
    if is_version6:
        return ipv6_mask_to_net_prefix(netmask)
    return ipv4_mask_to_net_prefix(netmask)


def mask_and_ipv4_to_bcast_addr(mask: str, ip: str) -> str:
    """Get string representation of broadcast address from an ip/mask pair"""
    return str(
        ipaddress.IPv4Network(f"{ip}/{mask}", strict=False).broadcast_address
    )


def prefix_and_ip_to_network_addr(prefix: int, ip: str) -> str:
    """Get string representation of the network address of an ip/prefix."""
    return str(
        ipaddress.ip_network(f"{ip}/{prefix}", strict=False).network_address
    )


def is_virtual_interface(ifname: str) -> bool:
    """Whether ifname is an alias such as eth0:0 on another interface."""
    return bool(re.search(r":\d+", ifname))
