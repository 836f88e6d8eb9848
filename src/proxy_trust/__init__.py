"""proxy-trust: trusted forwarding proxy filter for ASGI applications.

Validates ``X-Forwarded-For`` chains against a trusted IPv4 range and, when
every proxy hop is trusted, exposes the originating client address and host
to the application.

Main components:
    - ProxyTrustMiddleware: Starlette/FastAPI middleware
    - ProxyTrustConfig: filter settings
    - evaluate: framework-free chain evaluation
    - parse_cidr, build_trusted_range, TrustedRange: CIDR parsing

Example:
    >>> from fastapi import FastAPI
    >>> from proxy_trust import ProxyTrustConfig, ProxyTrustMiddleware
    >>>
    >>> app = FastAPI()
    >>> app.add_middleware(ProxyTrustMiddleware, config=ProxyTrustConfig(trusted="10.0.0.0/24"))
"""

from proxy_trust.chain import Evaluation, Outcome, evaluate, is_trusted_chain, split_header
from proxy_trust.cidr import TrustedRange, build_trusted_range, is_valid_range, parse_cidr
from proxy_trust.config import ProxyTrustConfig
from proxy_trust.exceptions import ProxyTrustError, UntrustedProxyError
from proxy_trust.middleware import ProxyTrustMiddleware, register_exception_handlers

__all__ = [
    "ProxyTrustMiddleware",
    "ProxyTrustConfig",
    "register_exception_handlers",
    "evaluate",
    "Evaluation",
    "Outcome",
    "is_trusted_chain",
    "split_header",
    "TrustedRange",
    "parse_cidr",
    "build_trusted_range",
    "is_valid_range",
    "ProxyTrustError",
    "UntrustedProxyError",
]
