"""Proxy trust middleware.

Rewrites the perceived client address and host of requests that arrived
through a fully trusted chain of forwarding proxies, and rejects (strict
mode) or ignores (lenient mode) forwarding headers sent through anything
else.
"""

from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from proxy_trust.chain import Evaluation, Outcome, evaluate
from proxy_trust.config import ProxyTrustConfig
from proxy_trust.exceptions import ProxyTrustError, UntrustedProxyError
from proxy_trust.logging import get_logger

logger = get_logger(__name__)


def apply_forwarded_identity(scope: dict[str, Any], evaluation: Evaluation) -> None:
    """Overwrite the client address and Host header of an ASGI scope.

    Only trusted evaluations carry values; anything else leaves the scope as is.

    Args:
        scope: ASGI connection scope, modified in place
        evaluation: Result of ``evaluate``
    """
    if evaluation.outcome is not Outcome.TRUSTED or evaluation.remote_addr is None:
        return

    client = scope.get("client")
    port = client[1] if client else 0
    scope["client"] = (evaluation.remote_addr, port)

    if evaluation.host is not None:
        headers = [(key, value) for key, value in scope.get("headers", []) if key != b"host"]
        headers.append((b"host", evaluation.host.encode("latin-1")))
        scope["headers"] = headers


def joined_header(request: Request, name: str) -> str | None:
    """Join every line of a repeated header with ", ", None when absent.

    Proxies may append their hop as a separate header line, so all lines
    take part in the chain.
    """
    value = ", ".join(request.headers.getlist(name))
    return value or None


def error_response(exc: ProxyTrustError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


class ProxyTrustMiddleware(BaseHTTPMiddleware):
    """Trusted forwarding proxy middleware.

    Validates the forwarded-for chain of every HTTP request against the
    configured trusted range. Trusted chains replace ``request.client`` and
    the Host header with the originating values.

    Args:
        app: ASGI application
        config: Filter settings (loaded from the environment when None)

    Example:
        >>> from fastapi import FastAPI
        >>> from proxy_trust import ProxyTrustConfig, ProxyTrustMiddleware
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(ProxyTrustMiddleware, config=ProxyTrustConfig(trusted="10.0.0.0/8"))
    """

    def __init__(self, app: Any, config: ProxyTrustConfig | None = None) -> None:
        super().__init__(app)
        self.config = config or ProxyTrustConfig()

    def evaluate_request(self, request: Request) -> Evaluation:
        """Run the chain evaluation for a request without modifying it."""
        return evaluate(
            joined_header(request, self.config.ip_header),
            joined_header(request, self.config.host_header),
            request.client.host if request.client else None,
            self.config,
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Evaluate the forwarding chain, then continue or reject.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Downstream response, or a 403 JSON response for an untrusted
            chain in strict mode
        """
        evaluation = self.evaluate_request(request)

        if not evaluation.should_proceed:
            logger.warning(
                "untrusted_proxy_rejected",
                hop=evaluation.untrusted_hop,
                peer=request.client.host if request.client else None,
                path=request.url.path,
            )
            return error_response(UntrustedProxyError(hop=evaluation.untrusted_hop))

        if evaluation.outcome is Outcome.UNTRUSTED_LENIENT:
            logger.info("untrusted_proxy_tolerated", hop=evaluation.untrusted_hop, path=request.url.path)
        elif evaluation.outcome is Outcome.TRUSTED:
            apply_forwarded_identity(request.scope, evaluation)
            logger.debug("forwarded_identity_applied", remote_addr=evaluation.remote_addr, host=evaluation.host)

        return await call_next(request)


async def proxy_trust_exception_handler(request: Request, exc: ProxyTrustError) -> JSONResponse:
    """Render a ProxyTrustError raised from a route as ``{"detail": ...}``."""
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the ProxyTrustError handler on a FastAPI application."""
    app.add_exception_handler(ProxyTrustError, proxy_trust_exception_handler)
