"""Common helpers for resource wrappers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from ..exceptions import LinkNotFoundError, UnexpectedResponseError

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from ..client import ScaleIOClient


def find_link(links: Iterable[Mapping[str, Any]] | None, rel: str) -> Mapping[str, Any]:
    """Return the link advertised under `rel`.

    Gateway objects carry a ``links`` list of ``{"rel": ..., "href": ...}``
    entries describing related collections.
    """
    for link in links or ():
        if link.get("rel") == rel and link.get("href"):
            return link
    raise LinkNotFoundError(f"No link with rel {rel!r} found")


class ResourceBase:
    """Provide shared helpers for resource modules."""

    def __init__(self, client: ScaleIOClient) -> None:
        self._client = client

    def _get(self, path: str) -> Any:
        return self._client.request("GET", path)

    def _post(self, path: str, payload: Mapping[str, Any]) -> Any:
        return self._client.request("POST", path, json_payload=payload)

    @staticmethod
    def _expect_object(payload: Any, operation: str) -> dict[str, Any]:
        if not isinstance(payload, Mapping):
            raise UnexpectedResponseError(
                f"Error decoding {operation} response: expected an object, "
                f"got {type(payload).__name__}",
                details=payload,
            )
        return dict(payload)

    @staticmethod
    def _expect_list(payload: Any, operation: str) -> list[dict[str, Any]]:
        if not isinstance(payload, list):
            raise UnexpectedResponseError(
                f"Error decoding {operation} response: expected an array, "
                f"got {type(payload).__name__}",
                details=payload,
            )
        return payload
