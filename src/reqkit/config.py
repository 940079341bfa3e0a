"""Validated client and transport settings."""

from __future__ import annotations

import os
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "REQKIT_"
_ENV_FIELDS = ("timeout", "http2", "proxy", "trust_env", "verify", "follow_redirects")


class ClientSettings(BaseModel):
    """Transport-level defaults shared by a client and its transport."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    timeout: float | None = Field(default=120.0, description="Overall request timeout; 0 or None disables it")
    idle_conn_timeout: float = Field(default=90.0, gt=0)
    tls_handshake_timeout: float = Field(default=10.0, gt=0)
    max_idle_conns: int = Field(default=100, ge=0)
    http2: bool = True
    proxy: str | None = None
    trust_env: bool = True
    verify: bool = True
    follow_redirects: bool = True

    @field_validator("timeout")
    @classmethod
    def _normalize_timeout(cls, value: float | None) -> float | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError("timeout must be non-negative")
        return value or None

    @field_validator("proxy")
    @classmethod
    def _normalize_proxy(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    def httpx_timeout(self) -> httpx.Timeout:
        if self.timeout is None:
            return httpx.Timeout(None, connect=self.tls_handshake_timeout)
        return httpx.Timeout(self.timeout, connect=min(self.timeout, self.tls_handshake_timeout))

    def httpx_limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_keepalive_connections=self.max_idle_conns,
            keepalive_expiry=self.idle_conn_timeout,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, *, prefix: str = ENV_PREFIX) -> "ClientSettings":
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in _ENV_FIELDS:
            raw = environ.get(f"{prefix}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls(**values)
