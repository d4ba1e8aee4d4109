# This file is part of setip. See LICENSE file for license information.

import ipaddress
import logging
import re
from typing import Union

from setip.exceptions import InvalidMask

LOG = logging.getLogger(__name__)

IPV4_RE = re.compile(r"([0-9]{1,3}\.){3}[0-9]{1,3}")
PREFIX_RE = re.compile(r"([1-9]|[12][0-9]|3[0-2])")

# Bits contributed by each octet value a netmask may contain
MASK_OCTET_BITS = {
    255: 8,
    254: 7,
    252: 6,
    248: 5,
    240: 4,
    224: 3,
    192: 2,
    128: 1,
    0: 0,
}


def is_ipv4_address(address: str) -> bool:
    """Returns a bool indicating if ``address`` is a dotted quad IPv4
    address.

    Each octet is one to three decimal digits in the range 0-255.
    """
    if not isinstance(address, str) or not IPV4_RE.fullmatch(address):
        return False
    return all(0 <= int(octet) <= 255 for octet in address.split("."))


def is_valid_prefix(prefix: Union[str, int]) -> bool:
    """Returns a bool indicating if ``prefix`` is a prefix length 1-32."""
    if isinstance(prefix, bool):
        return False
    if isinstance(prefix, int):
        return 1 <= prefix <= 32
    return bool(isinstance(prefix, str) and PREFIX_RE.fullmatch(prefix))


def is_contiguous_mask(mask: str) -> bool:
    """Returns a bool indicating if the dotted ``mask`` has no holes."""
    try:
        inverted = ~int(ipaddress.IPv4Address(mask)) & 0xFFFFFFFF
    except ValueError:
        return False
    return inverted & (inverted + 1) == 0


def mask_to_prefix(mask: Union[str, int]) -> int:
    """Convert a prefix length or a dotted ipv4 netmask to a prefix length.

       "24"            => 24
       "255.255.255.0" => 24

    Every octet is checked against the known netmask octet values on its
    own, so "255.0.255.0" is accepted as 16. A warning is logged for such
    non-contiguous masks.

    @raises: InvalidMask on anything else.
    """
    if is_valid_prefix(mask):
        return int(mask)
    if not isinstance(mask, str) or not is_ipv4_address(mask):
        raise InvalidMask("Invalid netmask: %s" % (mask,))
    bits = 0
    for octet in mask.split("."):
        try:
            bits += MASK_OCTET_BITS[int(octet)]
        except KeyError as e:
            raise InvalidMask("Invalid netmask: %s" % mask) from e
    if bits == 0:
        raise InvalidMask("Invalid netmask: %s" % mask)
    if not is_contiguous_mask(mask):
        LOG.warning(
            "Netmask %s is not contiguous, treating it as /%s", mask, bits
        )
    return bits


def prefix_to_mask(prefix: Union[str, int]) -> str:
    """Convert a network prefix to an ipv4 netmask.

    This is the inverse of mask_to_prefix.
        24 -> "255.255.255.0"
    Also supports input as a string."""
    if not is_valid_prefix(prefix):
        raise InvalidMask("Invalid prefix length: %s" % (prefix,))
    remaining = int(prefix)
    octets = []
    for _ in range(4):
        n = min(remaining, 8)
        octets.append(str(256 - 2 ** (8 - n)))
        remaining -= n
    return ".".join(octets)
