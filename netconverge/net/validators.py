# This file is part of netconverge. See LICENSE file for license information.

import logging
from typing import Iterable, List, Sequence

from netconverge import util
from netconverge.net.addresses import InterfaceAddress, IPResolver, resolve

LOG = logging.getLogger(__name__)


class InterfaceAddressError(Exception):
    pass


class DNSServersNotFoundError(Exception):
    pass


class InterfaceAddressesValidator:
    """Check that each interface actually holds its expected address."""

    def __init__(self, resolver: IPResolver):
        self.resolver = resolver

    def validate(self, addresses: Iterable[InterfaceAddress]):
        for address in addresses:
            expected = resolve(address)
            actual = self.resolver.get_ips(address.interface_name)
            if expected not in actual:
                raise InterfaceAddressError(
                    "Validating network interface '%s' IP addresses, "
                    "expected: '%s', actual: %s"
                    % (address.interface_name, expected, actual)
                )
            LOG.debug(
                "Interface %s holds expected address %s",
                address.interface_name,
                expected,
            )


class DNSValidator:
    """Check that the resolver file lists one of the DNS servers."""

    def __init__(self, resolv_conf_path: str):
        self.resolv_conf_path = resolv_conf_path

    def validate(self, dns_servers: Sequence[str]):
        if not dns_servers:
            return
        nameservers = self._nameservers()
        for server in dns_servers:
            if server in nameservers:
                return
        raise DNSServersNotFoundError(
            "None of the DNS servers %s were found in %s"
            % (list(dns_servers), self.resolv_conf_path)
        )

    def _nameservers(self) -> List[str]:
        nameservers = []
        for line in util.load_text_file(self.resolv_conf_path).splitlines():
            tokens = line.split("#", 1)[0].split()
            if len(tokens) >= 2 and tokens[0] == "nameserver":
                nameservers.append(tokens[1])
        return nameservers
