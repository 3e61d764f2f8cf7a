# This file is part of netconverge. See LICENSE file for license information.

import logging
import threading

from netconverge import subp, util

LOG = logging.getLogger(__name__)

GRUB_IPV6_DISABLE_OPT = "ipv6.disable=1"

SYSCTL_SETTINGS = [
    "net.ipv6.conf.all.accept_ra=1",
    "net.ipv6.conf.default.accept_ra=1",
    "net.ipv6.conf.all.disable_ipv6=0",
    "net.ipv6.conf.default.disable_ipv6=0",
]


class KernelIPv6:
    def __init__(self, grub_conf: str):
        self.grub_conf = grub_conf

    def enable(self, stop_event: threading.Event):
        """Enable IPv6 in the running kernel.

        When the boot loader disables IPv6 the option is removed and a
        reboot requested; this then blocks until stop_event is set.
        Otherwise the sysctl settings are applied and it returns.

        @raises: subp.ProcessExecutionError when a command fails.
        """
        grub = util.load_text_file(self.grub_conf, quiet=True)
        if GRUB_IPV6_DISABLE_OPT in grub:
            util.write_file(
                self.grub_conf, grub.replace(GRUB_IPV6_DISABLE_OPT, "")
            )
            LOG.info("Rebooting to enable IPv6 in kernel")
            subp.subp(["shutdown", "-r", "now"])
            stop_event.wait()
            return

        for setting in SYSCTL_SETTINGS:
            subp.subp(["sysctl", setting])
