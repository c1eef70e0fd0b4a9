"""
Pydantic v2 Configuration Models for CrptClient

Provides strict, typed configuration for the registry client:
- Request budget (rate limiting)
- Registry endpoint URLs
- HTTP client settings (timeouts, TLS, user agent)
- Token lifetime and document defaults
- Top-level ClientConfig as single source of truth

All models use extra="forbid" and are frozen; a client never observes its
configuration changing after construction.
"""

from __future__ import annotations

import hashlib
import json
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from CrptClient.ratelimit import RateBudget

DEFAULT_AUTH_CHALLENGE_URL = "https://ismp.crpt.ru/api/v3/auth/cert/key"
DEFAULT_TOKEN_URL = "https://ismp.crpt.ru/api/v3/auth/cert/"
DEFAULT_CREATE_DOCUMENT_URL = "https://ismp.crpt.ru/api/v3/lk/documents/create"
DEFAULT_TOKEN_LIFETIME_S = 10 * 60 * 60


class RateLimitPolicy(BaseModel):
    """Request budget applied to all outbound calls."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", frozen=True)

    permits: int = Field(default=100, description="Requests allowed per window")
    window_s: float = Field(default=1.0, description="Window length in seconds")

    @field_validator("permits")
    @classmethod
    def validate_permits(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("permits must be > 0")
        return v

    @field_validator("window_s")
    @classmethod
    def validate_window(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("window_s must be > 0")
        return v

    def to_budget(self) -> RateBudget:
        return RateBudget(permits=self.permits, window_s=self.window_s)


class EndpointsConfig(BaseModel):
    """Registry endpoint URLs."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", frozen=True)

    auth_challenge_url: str = Field(
        default=DEFAULT_AUTH_CHALLENGE_URL, description="GET: authentication challenge"
    )
    token_url: str = Field(
        default=DEFAULT_TOKEN_URL, description="POST: signed challenge -> token"
    )
    create_document_url: str = Field(
        default=DEFAULT_CREATE_DOCUMENT_URL, description="POST: document submission"
    )


class HttpConfig(BaseModel):
    """HTTP client settings."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", frozen=True)

    connect_timeout_s: float = Field(default=5.0, description="Connect timeout")
    read_timeout_s: float = Field(default=30.0, description="Read timeout")
    write_timeout_s: float = Field(default=30.0, description="Write timeout")
    pool_timeout_s: float = Field(default=5.0, description="Pool acquire timeout")
    max_connections: int = Field(default=32, description="Connection pool size")
    user_agent: str = Field(default="CrptClient/1.0", description="User-Agent header")
    verify_tls: bool = Field(default=True, description="Verify server certificates")

    @field_validator(
        "connect_timeout_s", "read_timeout_s", "write_timeout_s", "pool_timeout_s"
    )
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be > 0")
        return v

    @field_validator("max_connections")
    @classmethod
    def validate_max_connections(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_connections must be >= 1")
        return v


class ClientConfig(BaseModel):
    """
    Single source of truth for registry client configuration.

    Loaded from file (YAML/JSON), overlaid with environment variables,
    and finally overridden by CLI arguments. Precedence: file < env < CLI.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", frozen=True)

    rate_limit: RateLimitPolicy = Field(
        default_factory=RateLimitPolicy, description="Request budget"
    )
    token_lifetime_s: float = Field(
        default=DEFAULT_TOKEN_LIFETIME_S, description="Assumed validity of a fresh token"
    )
    document_format: str = Field(default="MANUAL", description="Document format marker")
    product_group: Optional[str] = Field(
        default=None, description="Default product group (e.g. 'milk'); None omits it"
    )
    endpoints: EndpointsConfig = Field(
        default_factory=EndpointsConfig, description="Registry endpoints"
    )
    http: HttpConfig = Field(default_factory=HttpConfig, description="HTTP client settings")

    @field_validator("token_lifetime_s")
    @classmethod
    def validate_lifetime(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("token_lifetime_s must be > 0")
        return v

    def config_hash(self) -> str:
        """
        Compute deterministic SHA256 hash of config for reproducibility.

        Returns:
            Hex-encoded SHA256 hash of normalized config JSON.
        """
        payload = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
