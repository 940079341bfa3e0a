"""Exceptions raised while executing requests."""

from __future__ import annotations


class ReqKitError(Exception):
    """Base exception for all reqkit failures."""

    def __init__(
        self,
        message: str,
        *,
        timeout: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout = timeout
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.cause is None:
            return str(self.args[0])
        return f"{self.args[0]}: {self.cause}"


class ReqKitNetworkError(ReqKitError):
    """Raised for transport-level failures like DNS and TCP errors."""


class ReqKitTimeoutError(ReqKitError):
    """Raised when a request exceeds the configured timeout."""
