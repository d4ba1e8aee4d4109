# This file is part of setip. See LICENSE file for license information.
"""Turn the positional command line arguments into a NetworkIntent.

The number of arguments decides what is being changed:

    <IP>                          ip_only
    <IP> <MASK>                   ip_mask
    DNS <DNS>                     dns_only
    <IP> <MASK> <GATEWAY>         ip_mask_gw
    <IP> <MASK> <GATEWAY> <DNS>   ip_mask_gw_dns

Values are validated as soon as they are parsed. Fields the mode leaves
unset are filled from the live state of the chosen interface later, by
resolve_intent.
"""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from setip import net
from setip.exceptions import InvalidArgument, MissingPrefix
from setip.netinfo import CurrentNetworkState

LOG = logging.getLogger(__name__)

USAGE = """\
Usage:
  setip <IP>
  setip <IP> <MASK>
  setip DNS <DNS>
  setip <IP> <MASK> <GATEWAY>
  setip <IP> <MASK> <GATEWAY> <DNS>

Notes:
  * Only the argument combinations above are accepted, in that order.
  * IP/GATEWAY/DNS must be IPv4 addresses; MASK is a 1-32 prefix length
    or a dotted netmask such as 255.255.255.0.
  * One argument: change the IP, keep the current mask/gateway/DNS.
  * Two arguments: 'DNS <server>' changes only the DNS server, otherwise
    IP and mask are changed and the current gateway/DNS are kept.
  * Three arguments: IP, mask and gateway.
  * Four arguments: IP, mask, gateway and DNS.
"""


class Mode(enum.Enum):
    IP_ONLY = "ip_only"
    IP_MASK = "ip_mask"
    DNS_ONLY = "dns_only"
    IP_MASK_GW = "ip_mask_gw"
    IP_MASK_GW_DNS = "ip_mask_gw_dns"


@dataclass(frozen=True)
class NetworkIntent:
    """The requested IPv4 state of one interface.

    None means "leave this attribute as currently configured".
    """

    interface: str
    ip: Optional[str] = None
    prefix: Optional[int] = None
    gateway: Optional[str] = None
    dns: Optional[str] = None

    def __post_init__(self):
        if self.prefix is not None and not net.is_valid_prefix(self.prefix):
            raise InvalidArgument("Invalid prefix length: %s" % self.prefix)


def parse_params(raw_args: Sequence[str]) -> Tuple[Mode, NetworkIntent]:
    """Map the positional arguments onto a mode and an interface-less intent.

    @raises: InvalidArgument for a wrong argument count or a bad value.
    """
    args = list(raw_args)
    ip = mask = gateway = dns = None
    if len(args) == 1:
        (ip,) = args
        mode = Mode.IP_ONLY
    elif len(args) == 2:
        if args[0].lower() == "dns":
            dns = args[1]
            mode = Mode.DNS_ONLY
        else:
            ip, mask = args
            mode = Mode.IP_MASK
    elif len(args) == 3:
        ip, mask, gateway = args
        mode = Mode.IP_MASK_GW
    elif len(args) == 4:
        ip, mask, gateway, dns = args
        mode = Mode.IP_MASK_GW_DNS
    else:
        raise InvalidArgument(USAGE)

    if ip and not net.is_ipv4_address(ip):
        raise InvalidArgument("Invalid IP address: %s" % ip)
    prefix = net.mask_to_prefix(mask) if mask else None
    if gateway and not net.is_ipv4_address(gateway):
        raise InvalidArgument("Invalid gateway: %s" % gateway)
    if dns and not net.is_ipv4_address(dns):
        raise InvalidArgument("Invalid DNS server: %s" % dns)

    LOG.debug(
        "Parsed %s as mode %s: ip=%s prefix=%s gateway=%s dns=%s",
        args,
        mode.value,
        ip,
        prefix,
        gateway,
        dns,
    )
    return mode, NetworkIntent(
        interface="",
        ip=ip or None,
        prefix=prefix,
        gateway=gateway or None,
        dns=dns or None,
    )


def resolve_intent(
    mode: Mode,
    params: NetworkIntent,
    interface: str,
    current: CurrentNetworkState,
) -> NetworkIntent:
    """Bind params to interface and fill the gaps the mode leaves open.

    ip_only takes the current prefix and gateway, ip_mask the current
    gateway, and every mode takes the current DNS server when none was
    given. Supplied values are never replaced.
    """
    prefix = params.prefix
    gateway = params.gateway
    dns = params.dns
    if mode is Mode.IP_ONLY:
        if prefix is None:
            prefix = current.prefix
        if gateway is None:
            gateway = current.gateway
    elif mode is Mode.IP_MASK:
        if gateway is None:
            gateway = current.gateway
    if dns is None:
        dns = current.dns
    intent = replace(
        params, interface=interface, prefix=prefix, gateway=gateway, dns=dns
    )
    LOG.debug("Resolved intent %s", intent)
    return intent


def require_prefix(intent: NetworkIntent, fallback: Optional[int]):
    """Return the prefix to write for intent.

    Prefers the prefix of the intent, then fallback. Raises MissingPrefix
    when an ip is being set and neither is known; returns None when no ip
    is being set and nothing is known.
    """
    prefix = intent.prefix if intent.prefix is not None else fallback
    if prefix is None and intent.ip:
        raise MissingPrefix(
            "Unable to determine the current netmask of %s, please pass the"
            " mask on the command line." % intent.interface
        )
    return prefix
