# This file is part of netconverge. See LICENSE file for license information.

from typing import Sequence

from netconverge import settings, subp


def render_resolv_conf(dns_servers: Sequence[str]) -> str:
    lines = [settings.GENERATED_HEADER]
    lines.extend("nameserver %s" % server for server in dns_servers)
    return "\n".join(lines) + "\n"


def update_resolvconf():
    """Regenerate the managed resolv.conf from the resolvconf inputs."""
    subp.subp(["resolvconf", "-u"])
