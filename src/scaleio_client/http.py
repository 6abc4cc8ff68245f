"""HTTP utilities for ScaleIO gateway access."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from requests import Response, Session

from .exceptions import AuthenticationError, RequestError, UnexpectedResponseError


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any
    headers: Mapping[str, str]


def _error_message(response: Response) -> str:
    # The gateway reports failures as {"message": ..., "httpStatusCode": ..., "errorCode": ...}
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping) and body.get("message"):
        return str(body["message"])
    return response.text[:200]


def ensure_success(response: Response) -> None:
    """Raise `RequestError` (or `AuthenticationError` on 401) for failed responses."""

    if 200 <= response.status_code < 300:
        return
    message = f"ScaleIO API error {response.status_code}: {_error_message(response)}"
    if response.status_code == 401:
        raise AuthenticationError(message, status_code=401, details=response.text)
    raise RequestError(message, status_code=response.status_code, details=response.text)


def parse_json(response: Response) -> Any:
    """Parse JSON with helpful error context."""

    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedResponseError("Response did not contain valid JSON") from exc


def request(
    session: Session,
    method: str,
    url: str,
    *,
    headers: MutableMapping[str, str] | None = None,
    json_payload: Mapping[str, Any] | None = None,
    timeout: float | tuple[float, float] | None = None,
    verify: bool | str = True,
) -> HttpResponse:
    """Make a request and return a parsed response envelope."""

    response = session.request(
        method=method,
        url=url,
        headers=headers,
        json=json_payload,
        timeout=timeout,
        verify=verify,
    )
    ensure_success(response)

    data: Any = None
    if response.content:
        data = parse_json(response)

    return HttpResponse(status_code=response.status_code, data=data, headers=response.headers)
