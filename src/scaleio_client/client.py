"""High-level ScaleIO REST client."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any
from urllib.parse import urljoin, urlparse

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .auth.base import AuthStrategy
from .config import DEFAULT_API_VERSION, ClientConfig
from .exceptions import RequestError
from .http import HttpResponse
from .http import request as http_request
from .resources import StoragePoolsResource, VolumesResource


logger = logging.getLogger(__name__)


class ScaleIOClient:
    """Wrap ScaleIO gateway endpoints with helper methods."""

    def __init__(
        self,
        *,
        base_url: str,
        auth_strategy: AuthStrategy,
        verify_ssl: bool | str = True,
        timeout: float = 30.0,
        default_headers: Mapping[str, str] | None = None,
        session: requests.Session | None = None,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        self.config = ClientConfig(
            base_url=base_url.rstrip("/"),
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_headers=default_headers,
            api_version=api_version,
        )
        self._suppress_insecure_warning_if_needed()
        self._session = session or requests.Session()
        self._auth = auth_strategy
        self.pools = StoragePoolsResource(self)
        self.volumes = VolumesResource(self)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> ScaleIOClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
    def request(
        self,
        method: str,
        path: str,
        *,
        json_payload: Mapping[str, Any] | None = None,
    ) -> Any:
        url = self._resolve_url(path)
        headers = self._prepare_headers()
        self._log_request(method, url)
        response = self._perform_request(
            method,
            url,
            headers=headers,
            json_payload=json_payload,
        )
        return response.data

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------------
    def _resolve_url(self, path: str) -> str:
        parsed = urlparse(path)
        if parsed.scheme and parsed.netloc:
            return path
        relative_path = path.lstrip("/")
        return urljoin(f"{self.config.base_url}/", relative_path)

    def _prepare_headers(self) -> MutableMapping[str, str]:
        headers = self.config.resolved_headers()
        self._auth.apply(headers)
        return headers

    def _perform_request(
        self,
        method: str,
        url: str,
        *,
        headers: MutableMapping[str, str],
        json_payload: Mapping[str, Any] | None,
    ) -> HttpResponse:
        try:
            return http_request(
                self._session,
                method,
                url,
                headers=headers,
                json_payload=json_payload,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise RequestError(
                f"Failed to communicate with ScaleIO gateway: {reason}", details=reason
            ) from exc

    def _log_request(self, method: str, url: str) -> None:
        logger.info(
            "ScaleIO request %s %s (api_version=%s)",
            method.upper(),
            url,
            self.config.api_version,
        )

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)
