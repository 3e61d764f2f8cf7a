#!/usr/bin/env python3

# This file is part of netconverge. See LICENSE file for license information.

import argparse
import logging
import sys
import threading

from netconverge import log, settings, util, version
from netconverge.net import schema
from netconverge.net.manager import NetManager, NetworkSetupError
from netconverge.net.networks import parse_networks

LOG = logging.getLogger(__name__)


class FixedInterfaces:
    """Stands in for interface discovery with a given name/MAC list."""

    def __init__(self, interfaces_by_mac):
        self.interfaces_by_mac = interfaces_by_mac

    def detect_mac_addresses(self):
        return dict(self.interfaces_by_mac)


def parse_interface(value):
    """Parse a 'name,mac' command line argument."""
    name, sep, mac = value.partition(",")
    if not sep or not name or not mac:
        raise argparse.ArgumentTypeError(
            "expected <name>,<mac> but got '%s'" % value
        )
    return name, mac.lower()


def load_settings(fname):
    """Read, validate and parse the network settings document.

    @returns: tuple of (Networks, ipv6 settings dict)
    """
    settings_doc = util.load_yaml(util.load_text_file(fname), default={})
    schema.validate_settings(settings_doc)
    return parse_networks(settings_doc), settings_doc.get("ipv6", {})


def handle_setup(name, args):
    networks, ipv6_settings = load_settings(args.settings)
    manager = NetManager.from_config(args.cfg, target=args.target)
    if args.ipv6:
        manager.setup_ipv6(ipv6_settings, threading.Event())
    manager.setup_networking(networks)
    return 0


def handle_render(name, args):
    networks, _ipv6 = load_settings(args.settings)
    manager = NetManager.from_config(args.cfg, target=args.target)
    if args.interfaces:
        manager.mac_address_detector = FixedInterfaces(
            {mac: ifname for ifname, mac in args.interfaces}
        )
    for artifact in manager.render_network_config(networks):
        print("### %s" % artifact.path)
        print(artifact.content, end="")
    return 0


def handle_interfaces(name, args):
    manager = NetManager.from_config(args.cfg, target=args.target)
    for ifname in manager.get_configured_network_interfaces():
        print(ifname)
    return 0


def get_parser(parser=None):
    if not parser:
        parser = argparse.ArgumentParser(
            prog="netconverge",
            description="Converge host networking to declared networks.",
        )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version="%(prog)s " + (version.version_string()),
        help="Show program's version number and exit.",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Show additional pre-action logging (default: %(default)s).",
        default=False,
    )
    parser.add_argument(
        "--config",
        "-c",
        action="store",
        help=(
            "Path to the netconverge config file. Defaults to $%s or %s."
            % (settings.CFG_ENV_NAME, settings.NETCONVERGE_CONFIG)
        ),
        default=None,
    )
    parser.add_argument(
        "--target",
        "-t",
        action="store",
        help="Root directory every managed file is resolved under.",
        default=None,
    )

    subparsers = parser.add_subparsers(title="Subcommands", dest="subcommand")
    subparsers.required = True

    parser_setup = subparsers.add_parser(
        "setup", help="Converge host networking to the settings file."
    )
    parser_setup.add_argument(
        "--settings",
        "-s",
        required=True,
        help="Path to the yaml network settings file.",
    )
    parser_setup.add_argument(
        "--ipv6",
        action="store_true",
        default=False,
        help=(
            "Enable kernel IPv6 first when the settings ask for it. "
            "This may reboot the host."
        ),
    )
    parser_setup.set_defaults(action=("setup", handle_setup))

    parser_render = subparsers.add_parser(
        "render", help="Print the files setup would write."
    )
    parser_render.add_argument(
        "--settings",
        "-s",
        required=True,
        help="Path to the yaml network settings file.",
    )
    parser_render.add_argument(
        "--mac",
        "-m",
        action="append",
        dest="interfaces",
        type=parse_interface,
        metavar="NAME,MAC",
        help="Use this interface instead of discovering the host's.",
    )
    parser_render.set_defaults(action=("render", handle_render))

    parser_interfaces = subparsers.add_parser(
        "interfaces", help="List configured network interfaces."
    )
    parser_interfaces.set_defaults(action=("interfaces", handle_interfaces))
    return parser


def main(sysv_args=None):
    log.configure_root_logger()
    if sysv_args is None:
        sysv_args = sys.argv[1:]
    parser = get_parser()
    args = parser.parse_args(args=sysv_args)

    args.cfg = util.read_cfg(args.config)
    log.setup_logging(
        args.cfg, level=logging.DEBUG if args.debug else logging.WARNING
    )

    (name, functor) = args.action
    try:
        return functor(name, args)
    except (NetworkSetupError, ValueError, OSError) as e:
        LOG.debug("'netconverge %s' failed", name, exc_info=True)
        sys.stderr.write("netconverge %s: %s\n" % (name, e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
