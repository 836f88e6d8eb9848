"""Proxy trust filter configuration.

Settings are read once, from keyword arguments or ``PROXY_TRUST_``
environment variables, and are read-only afterwards.
"""

from pydantic import Field, PrivateAttr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from proxy_trust.cidr import DEFAULT_TRUSTED, TrustedRange, build_trusted_range


class ProxyTrustConfig(BaseSettings):
    """Proxy trust filter settings.

    Attributes:
        trusted: Trusted proxy address or CIDR block. Falls back to
            127.0.0.1 when missing or malformed
        ip_header: Header carrying the forwarded-for chain
        host_header: Header carrying the forwarded-host chain
        strict: Reject requests with an untrusted hop (True) or ignore
            the forwarded values and continue (False)

    Example:
        >>> config = ProxyTrustConfig(trusted="10.0.0.0/24", strict=False)
        >>> config.trusted_range.max
        (10, 0, 0, 255)
    """

    trusted: str | None = Field(default=DEFAULT_TRUSTED, description="Trusted proxy IPv4 address or CIDR")
    ip_header: str = Field(default="x-forwarded-for", description="Forwarded-for header name")
    host_header: str = Field(default="x-forwarded-host", description="Forwarded-host header name")
    strict: bool = Field(default=True, description="Reject requests from untrusted proxies")

    _trusted_range: TrustedRange = PrivateAttr()

    model_config = SettingsConfigDict(
        env_prefix="PROXY_TRUST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("ip_header", "host_header")
    @classmethod
    def normalize_header_name(cls, value: str) -> str:
        """Header lookups are case-insensitive; store names lower-cased."""
        name = value.strip().lower()
        if not name:
            raise ValueError("Header name must not be empty")
        return name

    @model_validator(mode="after")
    def compute_trusted_range(self) -> "ProxyTrustConfig":
        """Parse ``trusted`` once so requests only do comparisons."""
        self._trusted_range = build_trusted_range(self.trusted)
        return self

    @property
    def trusted_range(self) -> TrustedRange:
        return self._trusted_range
