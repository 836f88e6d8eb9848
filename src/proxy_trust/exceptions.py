"""Proxy trust exception classes.

Each exception maps to the HTTP status code the middleware answers with.
"""


class ProxyTrustError(Exception):
    """Base class for proxy trust errors.

    Attributes:
        message: Error message
        status_code: HTTP status code
    """

    def __init__(self, message: str = "Proxy trust check failed", status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class UntrustedProxyError(ProxyTrustError):
    """A forwarding hop lies outside the trusted range (HTTP 403).

    Raised in strict mode only. The request is left unmodified.

    Attributes:
        hop: The first address that failed the trust check, if known
    """

    def __init__(
        self,
        message: str = "Incoming connection from untrusted proxy.",
        hop: str | None = None,
    ) -> None:
        self.hop = hop
        super().__init__(message=message, status_code=403)
