# This file is part of netconverge. See LICENSE file for license information.

import logging
import threading
import time
from typing import Iterable

from netconverge import subp
from netconverge.log import logexc
from netconverge.net.addresses import (
    InterfaceAddress,
    IPResolutionError,
    resolve,
)

LOG = logging.getLogger(__name__)


class AddressBroadcaster:
    """Announce interface addresses with gratuitous ARP.

    Each address gets count announcements, interval seconds apart, on its
    own thread. Failures are logged and never raised.
    """

    def __init__(self, count: int = 6, interval: float = 0.5):
        self.count = count
        self.interval = interval

    def broadcast_mac_addresses(self, addresses: Iterable[InterfaceAddress]):
        if not subp.which("arping"):
            LOG.warning("arping not found, not broadcasting addresses")
            return
        threads = []
        for address in addresses:
            thread = threading.Thread(
                target=self._broadcast,
                args=(address,),
                name="arp-%s" % address.interface_name,
            )
            thread.daemon = True
            thread.start()
            threads.append(thread)
        for thread in threads:
            thread.join()

    def _broadcast(self, address: InterfaceAddress):
        for attempt in range(self.count):
            if attempt:
                time.sleep(self.interval)
            try:
                # DHCP leases may arrive late, look the address up each time
                ip = resolve(address)
                subp.subp(
                    [
                        "arping",
                        "-c",
                        "1",
                        "-U",
                        "-I",
                        address.interface_name,
                        ip,
                    ]
                )
            except (subp.ProcessExecutionError, IPResolutionError):
                logexc(
                    LOG,
                    "Failed to broadcast address for %s",
                    address.interface_name,
                )
