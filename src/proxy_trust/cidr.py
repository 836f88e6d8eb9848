"""IPv4 CIDR parsing and range membership.

Converts a dotted-quad address or ``address/prefix`` string into an inclusive
octet-wise ``[min, max]`` range, and tests addresses against it.
"""

import ipaddress
import re

from pydantic import BaseModel, ConfigDict

from proxy_trust.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TRUSTED = "127.0.0.1"

_OCTET = r"(?:[0-9]|[1-9][0-9]|1[0-9]{2}|2[0-4][0-9]|25[0-5])"
CIDR_PATTERN = re.compile(rf"^(?:{_OCTET}\.){{3}}{_OCTET}(?:/(?:3[0-2]|[12][0-9]|[0-9]))?$")

Octets = tuple[int, int, int, int]


class TrustedRange(BaseModel):
    """Inclusive IPv4 range in octet form.

    Attributes:
        min: Lowest address of the block, one int per octet
        max: Highest address of the block, one int per octet
        count: Number of addresses in the block

    Example:
        >>> r = parse_cidr("10.0.0.0/24")
        >>> r.min, r.max
        ((10, 0, 0, 0), (10, 0, 0, 255))
        >>> r.contains("10.0.0.42")
        True
    """

    model_config = ConfigDict(frozen=True)

    min: Octets
    max: Octets
    count: int = 1

    def contains(self, ip: str) -> bool:
        """Check whether ``ip`` falls inside the range.

        Args:
            ip: Dotted-quad IPv4 address

        Returns:
            True if every octet lies within ``min``/``max``, False otherwise
            (including when ``ip`` is not a valid IPv4 address)
        """
        octets = parse_ipv4(ip)
        if octets is None:
            return False
        for octet, low, high in zip(octets, self.min, self.max):
            if octet < low or octet > high:
                return False
        return True


def is_valid_range(value: object) -> bool:
    """Return True if ``value`` matches ``a.b.c.d[/bits]`` (octets 0-255, bits 0-32)."""
    return isinstance(value, str) and CIDR_PATTERN.match(value) is not None


def parse_ipv4(value: str) -> Octets | None:
    """Split a dotted-quad address into four integer octets.

    Returns None when the value is not exactly four decimal octets in 0-255
    (leading zeros are rejected).
    """
    try:
        address = ipaddress.IPv4Address(value.strip())
    except ValueError:
        # Invalid IPv4 address
        return None
    return tuple(address.packed)  # type: ignore[return-value]


def _subnet_mask(bits: int) -> Octets:
    mask = [0, 0, 0, 0]
    position = 0
    while bits >= 8:
        mask[position] = 255
        bits -= 8
        position += 1
    if bits:
        # High-order bits of the partial octet, e.g. 4 -> 0b11110000
        mask[position] = (0xFF << (8 - bits)) & 0xFF
    return tuple(mask)  # type: ignore[return-value]


def parse_cidr(value: str) -> TrustedRange:
    """Compute the octet range of an already validated CIDR string.

    Numeric bounds are not re-checked here; run ``is_valid_range`` first or
    use ``build_trusted_range``.

    Args:
        value: ``a.b.c.d`` or ``a.b.c.d/bits``

    Returns:
        The inclusive range covered by the block
    """
    address, _, bits = value.partition("/")
    octets = tuple(int(part, 10) for part in address.split("."))

    if not bits:
        return TrustedRange(min=octets, max=octets, count=1)

    prefix = int(bits, 10)
    mask = _subnet_mask(prefix)
    return TrustedRange(
        min=tuple(octet & m for octet, m in zip(octets, mask)),
        max=tuple(octet | (~m & 0xFF) for octet, m in zip(octets, mask)),
        count=2 ** (32 - prefix),
    )


def build_trusted_range(value: str | None) -> TrustedRange:
    """Parse a trusted range, falling back to loopback on missing or bad input.

    Args:
        value: CIDR string from configuration, may be None

    Returns:
        The parsed range, or the ``127.0.0.1`` exact range
    """
    if is_valid_range(value):
        return parse_cidr(value)  # type: ignore[arg-type]

    if value is not None:
        logger.warning("trusted_range_fallback", trusted=value, fallback=DEFAULT_TRUSTED)
    return parse_cidr(DEFAULT_TRUSTED)
