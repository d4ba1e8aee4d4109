# This file is part of setip. See LICENSE file for license information.

import logging
import os
from typing import List, Optional

from setip import net, netinfo, util
from setip.exceptions import ApplyError
from setip.intent import Mode, NetworkIntent, require_prefix
from setip.net.backends import BackendKind, NetworkBackend

LOG = logging.getLogger(__name__)

IFCFG_SEED = """\
DEVICE={iface}
BOOTPROTO=none
ONBOOT=yes
"""


def update_ifcfg_lines(
    lines: List[str], intent: NetworkIntent, netmask: Optional[str]
) -> List[str]:
    """Return lines with the keys for every supplied field replaced.

    Keys of fields that are not being changed keep their lines and order,
    replaced keys are appended at the end.
    """
    drop = []
    add = []
    if intent.ip:
        # PREFIX would win over NETMASK, BOOTPROTO=dhcp over IPADDR
        drop += ["IPADDR=", "NETMASK=", "PREFIX=", "BOOTPROTO="]
        add += [
            "BOOTPROTO=none",
            "IPADDR=%s" % intent.ip,
            "NETMASK=%s" % netmask,
        ]
    if intent.gateway:
        drop.append("GATEWAY=")
        add.append("GATEWAY=%s" % intent.gateway)
    if intent.dns:
        drop.append("DNS1=")
        add.append("DNS1=%s" % intent.dns)
    return util.del_matching_lines(lines, drop) + add


class SysconfigBackend(NetworkBackend):
    """Edit ifcfg-<iface> under /etc/sysconfig/network-scripts."""

    kind = BackendKind.LEGACY_SCRIPTS

    def ifcfg_path(self, iface: str) -> str:
        return os.path.join(
            self._path("network_scripts_dir"), "ifcfg-%s" % iface
        )

    def write_ifcfg(
        self, path: str, intent: NetworkIntent, netmask: Optional[str]
    ) -> None:
        if not os.path.exists(path):
            print("[INFO] %s not found, creating it ..." % path)
            util.write_file(path, IFCFG_SEED.format(iface=intent.interface))
        lines = util.load_text_file(path).splitlines()
        lines = update_ifcfg_lines(lines, intent, netmask)
        util.write_file(path, "\n".join(lines) + "\n")

    def apply(self, intent: NetworkIntent, mode: Mode) -> Optional[int]:
        prefix = intent.prefix
        if prefix is None and intent.ip:
            prefix = require_prefix(
                intent, netinfo.current_prefix(intent.interface)
            )
        netmask = net.prefix_to_mask(prefix) if intent.ip else None

        path = self.ifcfg_path(intent.interface)
        try:
            self.write_ifcfg(path, intent, netmask)
        except OSError as e:
            util.logexc(LOG, "Updating %s failed", path)
            raise ApplyError("Unable to update %s: %s" % (path, e)) from e

        self._run(
            ["systemctl", "restart", "network"],
            "Failed to restart the network service, please check manually",
        )
        return prefix if intent.ip else None
