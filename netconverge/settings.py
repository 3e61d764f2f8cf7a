# This file is part of netconverge. See LICENSE file for license information.

# Set and read for determining the config file location
CFG_ENV_NAME = "NETCONVERGE_CFG"

# This is expected to be a yaml formatted file
NETCONVERGE_CONFIG = "/etc/netconverge/netconverge.cfg"

# Header written at the top of every rendered artifact
GENERATED_HEADER = "# Generated by netconverge"

# What u get if no config is provided
CFG_BUILTIN = {
    "paths": {
        "network_conf_dir": "/etc/systemd/network",
        "dhclient_conf": "/etc/dhcp/dhclient.conf",
        "resolv_conf": "/etc/resolv.conf",
        "resolvconf_base": "/etc/resolvconf/resolv.conf.d/base",
        "resolvconf_managed": "/run/resolvconf/resolv.conf",
        "grub_conf": "/boot/grub/grub.cfg",
    },
    "restart_networking_cmd": ["systemctl", "restart", "systemd-networkd"],
    "arp": {
        "count": 6,
        "interval": 0.5,
    },
    "log_basic": True,
    "log_cfgs": [],
}
