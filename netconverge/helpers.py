# This file is part of netconverge. See LICENSE file for license information.

import os
from typing import Optional

from netconverge import settings, subp


class Paths:
    """Host file locations, resolved under an optional target root.

    Values come from the 'paths' section of the config with the builtin
    defaults filling any gaps. The managed resolver link target is kept
    relative to the target root because it is the value of a symlink.
    """

    def __init__(self, path_cfgs: dict, target: Optional[str] = None):
        self.cfgs = path_cfgs
        self.target = target
        defaults = settings.CFG_BUILTIN["paths"]

        def lookup(key):
            return subp.target_path(target, path_cfgs.get(key, defaults[key]))

        self.network_conf_dir: str = lookup("network_conf_dir")
        self.dhclient_conf: str = lookup("dhclient_conf")
        self.resolv_conf: str = lookup("resolv_conf")
        self.resolvconf_base: str = lookup("resolvconf_base")
        self.grub_conf: str = lookup("grub_conf")
        self.resolvconf_managed: str = path_cfgs.get(
            "resolvconf_managed", defaults["resolvconf_managed"]
        )

    def network_unit(self, ifname: str) -> str:
        """Path of the networkd unit managed for ifname."""
        return os.path.join(self.network_conf_dir, "10_%s.network" % ifname)
