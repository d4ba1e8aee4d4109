# This file is part of setip. See LICENSE file for license information.

import logging
import os
import time
from typing import Callable, List, Optional

from setip import netinfo, safeyaml, settings, util
from setip.exceptions import ApplyError
from setip.intent import Mode, NetworkIntent, require_prefix
from setip.net.backends import BackendKind, NetworkBackend

LOG = logging.getLogger(__name__)

HEADER = "# Written by setip, overrides other netplan files for this device\n"


class NetplanBackend(NetworkBackend):
    """Layer a per-device override file over the existing netplan config.

    The override is named so that it sorts after other files in the
    netplan directory, netplan merges it last.
    """

    kind = BackendKind.NETPLAN
    required_command = ("netplan", "netplan.io")

    def __init__(self, cfg=None, runner=None, clock: Callable = time.time):
        super().__init__(cfg=cfg, runner=runner)
        self._clock = clock

    @property
    def netplan_dir(self) -> str:
        return self._path("netplan_dir")

    def override_path(self, iface: str) -> str:
        name = settings.NETPLAN_OVERRIDE_TMPL.format(iface=iface)
        return os.path.join(self.netplan_dir, name)

    def backup_existing(self) -> List[str]:
        """Copy every netplan yaml file aside with a timestamp suffix.

        The backups do not end in .yaml so netplan ignores them.
        """
        stamp = int(self._clock())
        backups = []
        for path in util.find_files(self.netplan_dir, "*.yaml"):
            dest = settings.NETPLAN_BACKUP_TMPL.format(path=path, stamp=stamp)
            util.copy(path, dest)
            backups.append(dest)
        return backups

    def render(self, intent: NetworkIntent, prefix: Optional[int]) -> str:
        """Return the override yaml holding only the changed fields."""
        entry: dict = {"dhcp4": False}
        if intent.ip:
            entry["addresses"] = ["%s/%s" % (intent.ip, prefix)]
        if intent.gateway:
            style = util.get_cfg_by_path(
                self.cfg, "netplan/gateway_style", "gateway4"
            )
            if style == "routes":
                entry["routes"] = [{"to": "default", "via": intent.gateway}]
            else:
                entry["gateway4"] = intent.gateway
        if intent.dns:
            entry["nameservers"] = {"addresses": [intent.dns]}
        config = {
            "network": {
                "version": 2,
                "ethernets": {intent.interface: entry},
            }
        }
        return safeyaml.dumps(config, header=HEADER)

    def apply(self, intent: NetworkIntent, mode: Mode) -> Optional[int]:
        prefix = intent.prefix
        if prefix is None and intent.ip:
            prefix = require_prefix(
                intent, netinfo.current_prefix(intent.interface)
            )

        path = self.override_path(intent.interface)
        content = self.render(intent, prefix)
        try:
            backups = self.backup_existing()
        except OSError as e:
            util.logexc(LOG, "Backing up %s failed", self.netplan_dir)
            raise ApplyError(
                "Unable to back up netplan config in %s: %s"
                % (self.netplan_dir, e)
            ) from e
        LOG.debug("Backed up netplan config to %s", backups)
        print("[INFO] Writing netplan config: %s" % path)
        try:
            util.write_file(path, content, mode=0o600)
        except OSError as e:
            util.logexc(LOG, "Writing %s failed", path)
            raise ApplyError(
                "Unable to write netplan config %s: %s" % (path, e)
            ) from e
        self._run(["netplan", "apply"], "netplan apply failed")
        return prefix if intent.ip else None
