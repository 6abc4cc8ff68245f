"""Configuration helpers for the ScaleIO client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_API_VERSION = "1.0"


def media_type(api_version: str = DEFAULT_API_VERSION) -> str:
    """Return the versioned JSON media type understood by the gateway."""

    return f"application/json;version={api_version}"


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `ScaleIOClient`."""

    base_url: str
    verify_ssl: bool | str = True
    timeout: float = 30.0
    default_headers: Mapping[str, str] | None = None
    api_version: str = DEFAULT_API_VERSION

    def resolved_headers(self) -> dict[str, str]:
        versioned = media_type(self.api_version)
        headers: dict[str, str] = {
            "Accept": versioned,
            "Content-Type": versioned,
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers
