# This file is part of netconverge. See LICENSE file for license information.

from typing import Sequence

from netconverge import settings, subp

DHCLIENT_CLIENT_NAME = "dhclient"

DHCLIENT_PREAMBLE = """\
option rfc3442-classless-static-routes code 121 = array of unsigned integer 8;

send host-name = gethostname();

request subnet-mask, broadcast-address, time-offset, routers,
	domain-name, domain-name-servers, domain-search, host-name,
	netbios-name-servers, netbios-scope, interface-mtu,
	rfc3442-classless-static-routes, ntp-servers;
"""


def render_dhclient_conf(dns_servers: Sequence[str]) -> str:
    """Render dhclient.conf.

    dhclient takes several servers in a single prepend directive and the
    position in that list is the priority, so the order is kept as given.
    """
    contents = settings.GENERATED_HEADER + "\n\n" + DHCLIENT_PREAMBLE
    if dns_servers:
        contents += "\nprepend domain-name-servers %s;\n" % ", ".join(
            dns_servers
        )
    return contents


def kill_dhcp_client():
    # exit code 1 means no process matched
    subp.subp(["pkill", DHCLIENT_CLIENT_NAME], rcs=[0, 1])


def delete_resolvconf_record(ifname: str):
    """Drop the resolvconf entry dhclient registered for ifname.

    resolvconf holds on to these after DHCP is removed from an interface.
    """
    subp.subp(["resolvconf", "-d", "%s.%s" % (ifname, DHCLIENT_CLIENT_NAME)])
