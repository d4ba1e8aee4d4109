# This file is part of setip. See LICENSE file for license information.
"""Confirm an applied change and summarize the resulting state."""

import logging
import sys
import time
from typing import Callable, Optional

from setip import netinfo, util
from setip.exceptions import VerificationFailed

LOG = logging.getLogger(__name__)

NOT_AVAILABLE = "not available"


def wait_for_address(
    iface: str,
    ip: str,
    prefix: Optional[int],
    timeout: float = 10.0,
    interval: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
):
    """Poll the addresses of iface until ip/prefix shows up.

    When prefix is None any prefix length is accepted for ip.

    @raises: VerificationFailed after timeout seconds without a match.
    """

    def _bound():
        for cidr in netinfo.interface_addresses(iface):
            addr, _, plen = cidr.partition("/")
            if addr == ip and (prefix is None or plen == str(prefix)):
                return True
        return False

    expected = ip if prefix is None else "%s/%s" % (ip, prefix)
    if not util.wait_for(
        _bound, timeout, naplen=interval, log_pre="[%s] " % iface, sleep=sleep
    ):
        raise VerificationFailed(
            "%s is not bound to %s after %s seconds, check the network"
            " configuration" % (expected, iface, timeout)
        )
    LOG.debug("Verified %s on %s", expected, iface)


def report(iface: str, resolv_conf: Optional[str] = None, out=None):
    """Print the live address, gateway and DNS servers of iface."""
    out = out or sys.stdout
    servers = netinfo.nameservers(resolv_conf)
    lines = [
        "================ Result ================",
        "Interface: %s" % iface,
        "IP/Prefix: %s" % (netinfo.current_address(iface) or NOT_AVAILABLE),
        "Gateway: %s" % (netinfo.current_gateway(iface) or NOT_AVAILABLE),
        "DNS: %s" % (",".join(servers) or NOT_AVAILABLE),
    ]
    out.write("\n".join(lines) + "\n")
