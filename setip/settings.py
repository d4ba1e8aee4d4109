# This file is part of setip. See LICENSE file for license information.

# Set and read for determining the config file location
CFG_ENV_NAME = "SETIP_CFG"

# This is expected to be a yaml formatted file
SETIP_CONFIG = "/etc/setip/setip.cfg"

OS_RELEASE_FILE = "/etc/os-release"
REDHAT_RELEASE_FILE = "/etc/redhat-release"
RESOLV_CONF_FILE = "/etc/resolv.conf"
NETPLAN_DIR = "/etc/netplan"
NETWORK_SCRIPTS_DIR = "/etc/sysconfig/network-scripts"

NM_SERVICE = "NetworkManager"
NM_CONNECTION_PREFIX = "setip-"
NETPLAN_OVERRIDE_TMPL = "99-setip-{iface}.yaml"
NETPLAN_BACKUP_TMPL = "{path}.setip-backup-{stamp}"

# Oldest releases that are known to work, as (major, minor)
MIN_OS_VERSIONS = {
    "ubuntu": (18, 4),
    "centos": (7, 5),
    "rhel": (7, 5),
}

# Commands needed before a backend can be detected, and the package
# that provides each of them
REQUIRED_COMMANDS = [
    ("ip", "iproute2"),
    ("awk", "gawk"),
    ("sed", "sed"),
    ("grep", "grep"),
]

# What u get if no config is provided
CFG_BUILTIN = {
    "paths": {
        "os_release": OS_RELEASE_FILE,
        "resolv_conf": RESOLV_CONF_FILE,
        "netplan_dir": NETPLAN_DIR,
        "network_scripts_dir": NETWORK_SCRIPTS_DIR,
    },
    "verify": {
        "timeout": 10.0,
        "interval": 0.5,
    },
    "netplan": {
        # 'gateway4' matches what older netplan releases expect,
        # 'routes' writes a default route instead.
        "gateway_style": "gateway4",
    },
    "ensure_commands": True,
    "log_level": "WARNING",
}
