"""Custom exception hierarchy for the ScaleIO client."""
from __future__ import annotations

from typing import Any


class ScaleIOError(RuntimeError):
    """Base error for ScaleIO failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthenticationError(ScaleIOError):
    """Raised when the gateway rejects the token or credentials."""


class RequestError(ScaleIOError):
    """Raised when an HTTP request cannot be fulfilled."""


class UnexpectedResponseError(ScaleIOError):
    """Raised when the API returns an unexpected payload structure."""


class ResolutionError(ScaleIOError):
    """Raised when a resource reference cannot be resolved to an API path."""


class LinkNotFoundError(ResolutionError):
    """Raised when a resource does not advertise the requested relationship link."""


class OperationNotImplementedError(ScaleIOError, NotImplementedError):
    """Raised by operations the client deliberately does not provide."""


class DeviceQueryError(ScaleIOError):
    """Raised when the local drv_cfg utility cannot be queried."""
