"""Forwarding chain validation.

Decides whether the proxies that forwarded a request are trusted, and which
client address and host the request should be seen as coming from.

Security model:
1. ``X-Forwarded-For: client, proxy1, proxy2`` lists the originating client
   first and the nearest proxy last. The socket peer is the final hop.
2. Every hop after the client, socket peer included, must lie in the
   trusted range. The client entry itself is never checked: it is the value
   being vouched for.
3. Only when the whole chain is trusted do the forwarded values replace the
   request's own address and host.
"""

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from proxy_trust.cidr import TrustedRange
from proxy_trust.config import ProxyTrustConfig
from proxy_trust.exceptions import UntrustedProxyError


class Outcome(StrEnum):
    """Result of evaluating a forwarding chain."""

    PASS_THROUGH = "pass_through"
    TRUSTED = "trusted"
    UNTRUSTED_STRICT = "untrusted_strict"
    UNTRUSTED_LENIENT = "untrusted_lenient"


class Evaluation(BaseModel):
    """Outcome of a chain evaluation plus the values to apply.

    Attributes:
        outcome: Which branch the evaluation took
        remote_addr: Originating client IP, set only when trusted
        host: Originating host, set only when trusted and a host header was sent
        untrusted_hop: First hop that failed the trust check, if any
    """

    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    remote_addr: str | None = None
    host: str | None = None
    untrusted_hop: str | None = None

    @property
    def should_proceed(self) -> bool:
        """False only for a strict-mode rejection."""
        return self.outcome is not Outcome.UNTRUSTED_STRICT

    def raise_for_outcome(self) -> None:
        """Raise UntrustedProxyError if the chain was rejected in strict mode."""
        if self.outcome is Outcome.UNTRUSTED_STRICT:
            raise UntrustedProxyError(hop=self.untrusted_hop)


def split_header(value: str) -> list[str]:
    """Split a comma-separated header value and trim each entry."""
    return [entry.strip() for entry in value.split(",")]


def first_untrusted(candidates: Iterable[str | None], trusted_range: TrustedRange) -> str | None:
    """Return the first candidate outside ``trusted_range``, or None if all are trusted.

    A missing candidate (e.g. no socket peer) is reported as an empty string.
    """
    for candidate in candidates:
        if candidate is None or not trusted_range.contains(candidate):
            return candidate or ""
    return None


def is_trusted_chain(candidates: Iterable[str | None], trusted_range: TrustedRange) -> bool:
    """Check that every proxy hop lies inside ``trusted_range``.

    Args:
        candidates: Intermediate proxy IPs followed by the socket peer IP
        trusted_range: Range the hops must fall into

    Returns:
        True if every candidate is trusted

    Example:
        >>> r = parse_cidr("10.0.0.0/24")
        >>> is_trusted_chain(["10.0.0.42", "10.0.0.1"], r)
        True
        >>> is_trusted_chain(["10.0.1.42", "10.0.0.1"], r)
        False
    """
    return first_untrusted(candidates, trusted_range) is None


def evaluate(
    ip_header_value: str | None,
    host_header_value: str | None,
    socket_peer_ip: str | None,
    config: ProxyTrustConfig,
) -> Evaluation:
    """Evaluate a request's forwarding headers against the trusted range.

    Args:
        ip_header_value: Raw forwarded-for header, None if absent
        host_header_value: Raw forwarded-host header, None if absent
        socket_peer_ip: Address of the directly connected peer
        config: Filter configuration

    Returns:
        The evaluation. Nothing is mutated here; callers apply
        ``remote_addr``/``host`` when the outcome is TRUSTED.

    Example:
        >>> evaluate("203.0.113.5", None, "127.0.0.1", ProxyTrustConfig()).remote_addr
        '203.0.113.5'
    """
    if not ip_header_value:
        return Evaluation(outcome=Outcome.PASS_THROUGH)

    originating_ip, *proxy_ips = split_header(ip_header_value)

    untrusted_hop = first_untrusted([*proxy_ips, socket_peer_ip], config.trusted_range)
    if untrusted_hop is not None:
        outcome = Outcome.UNTRUSTED_STRICT if config.strict else Outcome.UNTRUSTED_LENIENT
        return Evaluation(outcome=outcome, untrusted_hop=untrusted_hop)

    originating_host = None
    if host_header_value:
        originating_host = split_header(host_header_value)[0]

    return Evaluation(outcome=Outcome.TRUSTED, remote_addr=originating_ip, host=originating_host)
