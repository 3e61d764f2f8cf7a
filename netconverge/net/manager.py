# This file is part of netconverge. See LICENSE file for license information.
"""Converge the host's network configuration to the desired networks.

setup_networking() renders a systemd-networkd unit per interface (DHCP
interfaces first, then static ones, each sorted by name), dhclient.conf
when any interface uses DHCP, and writes each file only when its content
changed. Networking is restarted only if something was written. The
resulting addresses and DNS servers are then validated and the addresses
announced over ARP in the background.

Hosts whose networking is configured by someone else only get their
resolver configuration managed.
"""

import functools
import logging
import os
import threading
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from netconverge import helpers, net, settings, subp, util
from netconverge.log import logexc
from netconverge.net import dhcp, networkd, resolv_conf
from netconverge.net.addresses import (
    DeferredAddress,
    InterfaceAddress,
    IPResolver,
    KnownAddress,
)
from netconverge.net.arp import AddressBroadcaster
from netconverge.net.interfaces import (
    DHCPInterfaceConfig,
    InterfaceConfigurationCreator,
    MacAddressDetector,
    StaticInterfaceConfig,
    has_version6,
    sort_by_name,
)
from netconverge.net.kernel_ipv6 import KernelIPv6
from netconverge.net.networks import Networks
from netconverge.net.validators import (
    DNSValidator,
    InterfaceAddressesValidator,
)

LOG = logging.getLogger(__name__)


class NetworkSetupError(Exception):
    """A fatal step of network setup failed.

    The message is the operation that failed followed by its cause.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = operation if cause is None else "%s: %s" % (operation, cause)
        super().__init__(message)


class ComputeNetworkConfigError(NetworkSetupError):
    pass


class EnableIPv6Error(NetworkSetupError):
    pass


class WriteConfigError(NetworkSetupError):
    pass


class RestartNetworkingError(NetworkSetupError):
    pass


class StaticAddressValidationError(NetworkSetupError):
    pass


class DNSValidationError(NetworkSetupError):
    pass


class ResolvConfError(NetworkSetupError):
    pass


class Artifact(NamedTuple):
    path: str
    content: str


class NetManager:
    def __init__(
        self,
        paths: helpers.Paths,
        mac_address_detector=None,
        interface_configuration_creator=None,
        ip_resolver=None,
        interface_addresses_validator=None,
        dns_validator=None,
        address_broadcaster=None,
        kernel_ipv6=None,
        restart_networking_cmd: Optional[Sequence[str]] = None,
    ):
        self.paths = paths
        self.mac_address_detector = (
            mac_address_detector or MacAddressDetector()
        )
        self.interface_configuration_creator = (
            interface_configuration_creator or InterfaceConfigurationCreator()
        )
        self.ip_resolver = ip_resolver or IPResolver()
        self.interface_addresses_validator = (
            interface_addresses_validator
            or InterfaceAddressesValidator(self.ip_resolver)
        )
        self.dns_validator = dns_validator or DNSValidator(paths.resolv_conf)
        self.address_broadcaster = address_broadcaster or AddressBroadcaster()
        self.kernel_ipv6 = kernel_ipv6 or KernelIPv6(paths.grub_conf)
        self.restart_networking_cmd = list(
            restart_networking_cmd
            or settings.CFG_BUILTIN["restart_networking_cmd"]
        )

    @classmethod
    def from_config(cls, cfg: dict, target: Optional[str] = None):
        """Build a NetManager from a merged netconverge config."""
        paths = helpers.Paths(cfg.get("paths", {}), target=target)
        arp_cfg = cfg.get("arp", {})
        return cls(
            paths,
            address_broadcaster=AddressBroadcaster(
                count=arp_cfg.get("count", 6),
                interval=arp_cfg.get("interval", 0.5),
            ),
            restart_networking_cmd=cfg.get("restart_networking_cmd"),
        )

    def compute_network_config(
        self, networks: Networks
    ) -> Tuple[
        List[StaticInterfaceConfig], List[DHCPInterfaceConfig], List[str]
    ]:
        """Split networks into static and DHCP interface configs.

        VIP networks are dropped first. The DNS servers come from the DNS
        default network among the rest.
        """
        non_vip = networks.non_vip()
        interfaces_by_mac = self._detect_mac_addresses()
        try:
            creator = self.interface_configuration_creator
            static_configs, dhcp_configs = (
                creator.create_interface_configurations(
                    non_vip, interfaces_by_mac
                )
            )
        except Exception as e:
            raise ComputeNetworkConfigError(
                "Creating interface configurations", e
            ) from e
        return static_configs, dhcp_configs, list(non_vip.dns_servers())

    def render_network_config(self, networks: Networks) -> List[Artifact]:
        """The files setup_networking would converge, without writing."""
        static_configs, dhcp_configs, dns_servers = (
            self.compute_network_config(networks)
        )
        return self._render_artifacts(
            sort_by_name(dhcp_configs),
            sort_by_name(static_configs),
            dns_servers,
        )

    def _detect_mac_addresses(self) -> Dict[str, str]:
        try:
            return self.mac_address_detector.detect_mac_addresses()
        except Exception as e:
            raise ComputeNetworkConfigError(
                "Getting network interfaces", e
            ) from e

    def setup_ipv6(self, ipv6_settings: dict, stop_event: threading.Event):
        """Enable kernel IPv6 if asked to; may block until stop_event."""
        if not ipv6_settings.get("enable"):
            return
        try:
            self.kernel_ipv6.enable(stop_event)
        except Exception as e:
            raise EnableIPv6Error("Enabling IPv6 in kernel", e) from e

    def setup_networking(self, networks: Networks):
        if networks.is_preconfigured():
            # Addresses are not broadcast in this case
            LOG.info("Networking is preconfigured, only managing DNS")
            self._write_resolv_conf(networks)
            return

        static_configs, dhcp_configs, dns_servers = (
            self.compute_network_config(networks)
        )
        static_configs = sort_by_name(static_configs)
        dhcp_configs = sort_by_name(dhcp_configs)

        if has_version6(static_configs):
            try:
                self.kernel_ipv6.enable(threading.Event())
            except Exception as e:
                raise EnableIPv6Error("Enabling IPv6 in kernel", e) from e

        artifacts = self._render_artifacts(
            dhcp_configs, static_configs, dns_servers
        )
        if self._converge_artifacts(artifacts):
            self._remove_dhcp_dns_configuration()
            self._restart_networking()
        else:
            LOG.debug("Network configuration unchanged, not restarting")

        static_addresses, dynamic_addresses = self._iface_addresses(
            static_configs, dhcp_configs
        )
        # Aliases such as eth0:0 are only validated through their parent
        addresses_to_validate = [
            address
            for address in static_addresses
            if not net.is_virtual_interface(address.interface_name)
        ]
        try:
            self.interface_addresses_validator.validate(addresses_to_validate)
        except Exception as e:
            raise StaticAddressValidationError(
                "Validating static network configuration", e
            ) from e

        try:
            self.dns_validator.validate(dns_servers)
        except Exception as e:
            raise DNSValidationError("Validating dns configuration", e) from e

        util.spawn_detached(
            self.address_broadcaster.broadcast_mac_addresses,
            static_addresses + dynamic_addresses,
            name="address-broadcast",
        )

    def _render_artifacts(
        self,
        dhcp_configs: List[DHCPInterfaceConfig],
        static_configs: List[StaticInterfaceConfig],
        dns_servers: List[str],
    ) -> List[Artifact]:
        artifacts = []
        for dhcp_config in dhcp_configs:
            artifacts.append(
                self._render_unit(
                    dhcp_config,
                    networkd.render_dynamic_interface,
                    dns_servers,
                )
            )
        for static_config in static_configs:
            artifacts.append(
                self._render_unit(
                    static_config,
                    networkd.render_static_interface,
                    dns_servers,
                )
            )
        if dhcp_configs:
            artifacts.append(
                Artifact(
                    self.paths.dhclient_conf,
                    dhcp.render_dhclient_conf(dns_servers),
                )
            )
        return artifacts

    def _render_unit(self, config, render, dns_servers) -> Artifact:
        try:
            contents = render(config, dns_servers)
        except ValueError as e:
            raise WriteConfigError(
                "Generating network configuration for %s" % config.name, e
            ) from e
        LOG.debug(
            "Rendered %s configuration with contents: %s",
            config.name,
            contents,
        )
        return Artifact(self.paths.network_unit(config.name), contents)

    def _converge_artifacts(self, artifacts: List[Artifact]) -> bool:
        """Write every artifact that changed, True if any did."""

        def converge(changed: bool, artifact: Artifact) -> bool:
            try:
                written = util.converge_file(artifact.path, artifact.content)
            except OSError as e:
                raise WriteConfigError(
                    "Writing to %s" % artifact.path, e
                ) from e
            if written:
                LOG.info("Updated %s", artifact.path)
            return written or changed

        return functools.reduce(converge, artifacts, False)

    def get_configured_network_interfaces(self) -> List[str]:
        interfaces = []
        for ifname in sorted(self._detect_mac_addresses().values()):
            try:
                _out, stderr = subp.subp(["ip", "link", "show", ifname])
            except subp.ProcessExecutionError as e:
                logexc(
                    LOG, "Ignoring failure to get network interface %s", ifname
                )
                stderr = e.stderr
            missing = 'Device "%s" does not exist' % ifname
            if missing not in (stderr or ""):
                interfaces.append(ifname)
        return interfaces

    def _remove_dhcp_dns_configuration(self):
        # Removing DHCP from an interface's config and restarting the
        # network does not stop dhclient
        try:
            dhcp.kill_dhcp_client()
        except subp.ProcessExecutionError:
            logexc(LOG, "Ignoring failure calling 'pkill dhclient'")

        for ifname in sorted(self._detect_mac_addresses().values()):
            try:
                dhcp.delete_resolvconf_record(ifname)
            except subp.ProcessExecutionError:
                logexc(
                    LOG,
                    "Ignoring failure calling 'resolvconf -d %s.dhclient'",
                    ifname,
                )

    def _restart_networking(self):
        LOG.info("Restarting networking")
        try:
            subp.subp(self.restart_networking_cmd)
        except subp.ProcessExecutionError as e:
            raise RestartNetworkingError(
                "Failure restarting networking", e
            ) from e

    def _iface_addresses(
        self,
        static_configs: List[StaticInterfaceConfig],
        dhcp_configs: List[DHCPInterfaceConfig],
    ) -> Tuple[List[InterfaceAddress], List[InterfaceAddress]]:
        static_addresses: List[InterfaceAddress] = [
            KnownAddress(config.name, config.address)
            for config in static_configs
        ]
        dynamic_addresses: List[InterfaceAddress] = [
            DeferredAddress(config.name, self.ip_resolver)
            for config in dhcp_configs
        ]
        return static_addresses, dynamic_addresses

    def _write_resolv_conf(self, networks: Networks):
        dns_servers = networks.dns_servers()
        contents = resolv_conf.render_resolv_conf(dns_servers)
        resolv_conf_path = self.paths.resolv_conf
        base_path = self.paths.resolvconf_base

        if dns_servers:
            # Only the base is ours, other inputs may extend it
            try:
                util.converge_file(base_path, contents)
            except OSError as e:
                raise ResolvConfError("Writing to %s" % base_path, e) from e
        else:
            # Before resolv.conf is linked to the managed file, keep
            # whatever it already configures
            try:
                link_target = util.read_and_follow_link(resolv_conf_path)
            except OSError as e:
                raise ResolvConfError(
                    "Reading %s symlink" % resolv_conf_path, e
                ) from e
            expected_path = os.path.join(
                os.path.realpath(os.path.dirname(resolv_conf_path)),
                os.path.basename(resolv_conf_path),
            )
            if link_target == expected_path:
                try:
                    util.copy(resolv_conf_path, base_path)
                except OSError as e:
                    raise ResolvConfError(
                        "Copying %s for backwards compat" % resolv_conf_path,
                        e,
                    ) from e

        try:
            util.sym_link(
                self.paths.resolvconf_managed, resolv_conf_path, force=True
            )
        except OSError as e:
            raise ResolvConfError(
                "Setting up %s symlink" % resolv_conf_path, e
            ) from e

        try:
            resolv_conf.update_resolvconf()
        except subp.ProcessExecutionError as e:
            raise ResolvConfError("Updating resolvconf", e) from e
