# This file is part of setip. See LICENSE file for license information.

import logging
import re
from typing import List, Optional, Tuple

from setip import settings, subp
from setip.intent import Mode, NetworkIntent, require_prefix
from setip.net.backends import BackendKind, NetworkBackend

LOG = logging.getLogger(__name__)


def _split_terse(line: str) -> List[str]:
    """Split one line of 'nmcli -t' output on unescaped colons."""
    fields = re.split(r"(?<!\\):", line)
    return [f.replace("\\:", ":").replace("\\\\", "\\") for f in fields]


def conn_name(iface: str) -> str:
    return "%s%s" % (settings.NM_CONNECTION_PREFIX, iface)


class NetworkManagerBackend(NetworkBackend):
    """Edit the NetworkManager connection profile bound to a device."""

    kind = BackendKind.NETWORK_MANAGER
    required_command = ("nmcli", "NetworkManager")

    def find_connection(self, iface: str) -> Optional[str]:
        (out, _err) = self._run(
            ["nmcli", "-t", "-f", "NAME,DEVICE", "connection", "show"],
            "Unable to list NetworkManager connections",
        )
        for line in out.splitlines():
            fields = _split_terse(line)
            if len(fields) == 2 and fields[1] == iface:
                return fields[0]
        return None

    def create_connection(self, iface: str) -> str:
        """Add an autoconnecting ethernet profile bound to iface."""
        name = conn_name(iface)
        print("[INFO] No connection for %s, creating %s ..." % (iface, name))
        self._run(
            [
                "nmcli",
                "connection",
                "add",
                "type",
                "ethernet",
                "con-name",
                name,
                "ifname",
                iface,
                "autoconnect",
                "yes",
            ],
            "Unable to create connection %s" % name,
        )
        return name

    def stored_prefix(self, name: str) -> Optional[int]:
        """Return the prefix of the first address stored in a profile."""
        (out, _err) = self._run(
            ["nmcli", "-g", "ipv4.addresses", "connection", "show", name],
            "Unable to read connection %s" % name,
        )
        first = out.strip().splitlines()[0] if out.strip() else ""
        first = first.split(",")[0].strip()
        _addr, sep, plen = first.partition("/")
        if sep and plen.isdigit():
            return int(plen)
        return None

    def modify_args(
        self, intent: NetworkIntent, mode: Mode, prefix: Optional[int]
    ) -> List[Tuple[str, str]]:
        """Return the (property, value) pairs to set on the profile."""
        props = []
        if intent.ip or intent.gateway:
            props.append(("ipv4.method", "manual"))
        if intent.ip:
            props.append(("ipv4.addresses", "%s/%s" % (intent.ip, prefix)))
        if intent.gateway:
            props.append(("ipv4.gateway", intent.gateway))
        if intent.dns:
            props.append(("ipv4.dns", intent.dns))
        if intent.dns or mode is Mode.DNS_ONLY:
            props.append(("ipv4.ignore-auto-dns", "yes"))
        return props

    def apply(self, intent: NetworkIntent, mode: Mode) -> Optional[int]:
        name = self.find_connection(intent.interface)
        prefix = intent.prefix
        if prefix is None and intent.ip:
            # a profile created below has no address to take a prefix from
            stored = self.stored_prefix(name) if name else None
            prefix = require_prefix(intent, stored)
        if name:
            LOG.debug(
                "Found connection '%s' for %s", name, intent.interface
            )
        else:
            name = self.create_connection(intent.interface)

        props = self.modify_args(intent, mode, prefix)
        if props:
            cmd = ["nmcli", "connection", "modify", name]
            for key, value in props:
                cmd.extend([key, value])
            self._run(cmd, "Unable to modify connection %s" % name)

        try:
            self._runner(["nmcli", "connection", "down", name])
        except subp.ProcessExecutionError as e:
            LOG.debug("Ignoring failure to bring %s down: %s", name, e)
        self._run(
            ["nmcli", "connection", "up", name],
            "Unable to activate connection %s" % name,
        )
        return prefix if intent.ip else None
