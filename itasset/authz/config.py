"""Token signing configuration. No hardcoded secrets outside development defaults."""

from __future__ import annotations

from dataclasses import dataclass

_HMAC_MIN_SECRET_BYTES = 32


@dataclass(frozen=True)
class TokenConfig:
    """
    Settings for minting and verifying access tokens.

    ``ttl_seconds`` is also the staleness window: a token keeps the permission
    snapshot it was issued with for at most this long.
    """

    secret: str
    algorithm: str = "HS256"
    issuer: str = "itasset"
    audience: str | None = "itasset-api"
    ttl_seconds: int = 3600
    clock_skew_seconds: int = 0

    def __post_init__(self) -> None:
        if not self.secret:
            raise _config_error("Token secret must be set")
        if self.algorithm.startswith("HS") and len(self.secret.encode("utf-8")) < _HMAC_MIN_SECRET_BYTES:
            raise _config_error(f"Token secret must be at least {_HMAC_MIN_SECRET_BYTES} bytes for {self.algorithm}")
        if self.ttl_seconds <= 0:
            raise _config_error("Token TTL must be positive")
        if self.clock_skew_seconds < 0:
            raise _config_error("Clock skew must not be negative")


def _config_error(msg: str) -> Exception:
    return ValueError(msg)
