"""Data models for rest-client.

All models use Pydantic v2. Request and Response are frozen: a Request is
consumed once by the request builder, and a Response is handed to the caller
as an immutable value.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Core HTTP Models
# =============================================================================


class Method(str, Enum):
    """Recognized HTTP verbs.

    Request.method is an open string, so any valid HTTP token is accepted;
    these constants cover the common verbs.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Request(BaseModel):
    """Declarative description of one HTTP call.

    The method is not validated here; build_request_object rejects methods
    that are not valid HTTP tokens.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: str = Field(description="HTTP method (GET, POST, etc.)")
    base_url: str = Field(default="", description="Absolute URL, optionally with a path")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    query_params: dict[str, str] = Field(
        default_factory=dict, description="Query parameters appended to base_url"
    )
    body: bytes | None = Field(default=None, description="Raw request payload")

    @field_validator("method", mode="before")
    @classmethod
    def unwrap_method(cls, v: Any) -> Any:
        if isinstance(v, Method):
            return v.value
        return v


class Response(BaseModel):
    """Normalized HTTP response.

    Header keys are lowercase. Header values are arrays for repeated headers.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    status_code: int = Field(description="HTTP status code")
    body: str = Field(default="", description="Response body decoded as text")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers (lowercase keys, array values)"
    )


# =============================================================================
# Client Configuration Models
# =============================================================================


class ClientConfig(BaseModel):
    """Transport settings for a custom Client."""

    model_config = ConfigDict(extra="forbid")

    timeout: float | None = Field(
        default=None, gt=0, description="Timeout in seconds (None uses the httpx default)"
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent with every request (supports ${ENV_VAR} substitution)",
    )
    verify_ssl: bool = Field(default=True, description="Verify server certificates")
    ca_bundle: str | None = Field(default=None, description="Path to CA bundle for verification")
    cert: str | None = Field(default=None, description="Client certificate path (mTLS)")
    key: str | None = Field(default=None, description="Client private key path (mTLS)")
    key_password: str | None = Field(default=None, description="Password for the private key")
    ciphers: str | None = Field(default=None, description="OpenSSL cipher string")
    follow_redirects: bool = Field(default=False, description="Follow 3xx redirects")
    proxy: str | None = Field(default=None, description="Proxy URL")

    @model_validator(mode="after")
    def check_cert_pair(self) -> Self:
        if (self.cert is None) != (self.key is None):
            raise ValueError("cert and key must be specified together")
        if self.key_password is not None and self.key is None:
            raise ValueError("key_password requires key")
        return self
