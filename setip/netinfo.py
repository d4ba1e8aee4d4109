# This file is part of setip. See LICENSE file for license information.
"""Read-only queries of the live network state, using iproute2."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from setip import settings, subp, util

LOG = logging.getLogger(__name__)

LOOPBACK = "lo"


@dataclass(frozen=True)
class CurrentNetworkState:
    """What the OS reports for an interface at one point in time."""

    prefix: Optional[int] = None
    gateway: Optional[str] = None
    dns: Optional[str] = None


def _parse_link_names(ip_link_out: str) -> List[str]:
    """
    Get interface names from 'ip -o link show' output.

    @param ip_link_out: Output string from 'ip -o link show' command.

    @returns: Interface names in the order listed, loopback excluded.
    """
    names = []
    for line in ip_link_out.splitlines():
        m = re.match(r"^\d+:\s+(?P<dev>[^:\s]+):", line)
        if not m:
            continue
        name = m.group("dev").split("@")[0]
        if name != LOOPBACK and name not in names:
            names.append(name)
    return names


def _parse_inet_cidrs(ip_addr_out: str) -> List[str]:
    """Return every 'a.b.c.d/p' listed on 'inet' lines of ip addr output."""
    cidrs = []
    for line in ip_addr_out.splitlines():
        m = re.search(
            r"\sinet\s(?P<cidr4>[0-9.]+)(/(?P<prefix>\d+))?", line
        )
        if m:
            cidrs.append(
                "%s/%s" % (m.group("cidr4"), m.group("prefix") or "32")
            )
    return cidrs


def list_interfaces() -> List[str]:
    """Return all link layer interface names except loopback."""
    (out, _err) = subp.subp(["ip", "-o", "link", "show"])
    return _parse_link_names(out)


def interface_addresses(iface: str) -> List[str]:
    """Return the ipv4 addresses bound to iface as 'ip/prefix' strings."""
    try:
        (out, _err) = subp.subp(
            ["ip", "-o", "-f", "inet", "addr", "show", iface]
        )
    except subp.ProcessExecutionError:
        util.logexc(LOG, "Unable to read addresses of %s", iface)
        return []
    return _parse_inet_cidrs(out)


def current_prefix(iface: str) -> Optional[int]:
    cidrs = interface_addresses(iface)
    if not cidrs:
        return None
    return int(cidrs[0].partition("/")[2])


def current_address(iface: str) -> Optional[str]:
    cidrs = interface_addresses(iface)
    return cidrs[0] if cidrs else None


def current_gateway(iface: str) -> Optional[str]:
    """Return the first default gateway routed through iface."""
    try:
        (out, _err) = subp.subp(
            ["ip", "route", "show", "default", "dev", iface]
        )
    except subp.ProcessExecutionError:
        util.logexc(LOG, "Unable to read default route of %s", iface)
        return None
    for line in out.splitlines():
        m = re.search(r"\bvia\s+(?P<gw>\S+)", line)
        if m:
            return m.group("gw")
    return None


def nameservers(resolv_conf: Optional[str] = None) -> List[str]:
    """Return the nameserver entries of resolv.conf, in file order."""
    resolv_conf = resolv_conf or settings.RESOLV_CONF_FILE
    content = util.load_text_file(resolv_conf, quiet=True)
    found = []
    for line in content.splitlines():
        toks = line.split()
        if len(toks) >= 2 and toks[0] == "nameserver":
            found.append(toks[1])
    return found


def current_dns(resolv_conf: Optional[str] = None) -> Optional[str]:
    servers = nameservers(resolv_conf)
    return servers[0] if servers else None


def current_state(
    iface: str, resolv_conf: Optional[str] = None
) -> CurrentNetworkState:
    return CurrentNetworkState(
        prefix=current_prefix(iface),
        gateway=current_gateway(iface),
        dns=current_dns(resolv_conf),
    )


def netdev_pformat(interfaces: List[str]) -> str:
    """Return a numbered listing of interfaces and their addresses."""
    lines = []
    for idx, iface in enumerate(interfaces, start=1):
        cidrs = interface_addresses(iface)
        if cidrs:
            lines.append("%d) %s [%s]" % (idx, iface, ",".join(cidrs)))
        else:
            lines.append("%d) %s" % (idx, iface))
    return "\n".join(lines)
