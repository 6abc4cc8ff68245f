"""Volume operations scoped to a storage pool."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import OperationNotImplementedError, ResolutionError
from .base import ResourceBase, find_link

VOLUME_RELATIONSHIP = "/api/StoragePool/relationship/Volume"
VOLUME_CREATE_PATH = "/api/types/Volume/instances"


class VolumesResource(ResourceBase):
    """Interact with the volumes of a ScaleIO storage pool.

    Every operation takes the storage pool object (as returned by
    ``client.pools.get``) that scopes it.
    """

    def get(
        self,
        pool: Mapping[str, Any],
        *,
        volume_id: str | None = None,
        volume_href: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch one volume or every volume of `pool`.

        Args:
            pool: The owning storage pool object.
            volume_id: Fetch this volume instance.
            volume_href: Fetch the volume at this href when no id is given.

        Returns:
            A list holding the requested volume, or all volumes of the pool
            when neither target is given.
        """
        if volume_id:
            payload = self._get(f"/api/instances/Volume::{volume_id}")
            return [self._expect_object(payload, "volume instance")]
        if volume_href:
            return [self._expect_object(self._get(volume_href), "volume instance")]

        link = find_link(pool.get("links"), VOLUME_RELATIONSHIP)
        return self._expect_list(self._get(link["href"]), "storage pool volumes")

    def list(self, pool: Mapping[str, Any]) -> list[dict[str, Any]]:
        return self.get(pool)

    def find(
        self,
        pool: Mapping[str, Any],
        *,
        volume_id: str | None = None,
        name: str | None = None,
        href: str | None = None,
    ) -> dict[str, Any]:
        raise OperationNotImplementedError(
            "Volume lookup by id, name or href is not supported; use get() with "
            "volume_id or volume_href instead."
        )

    def create(self, pool: Mapping[str, Any], params: Mapping[str, Any]) -> dict[str, Any]:
        """Create a volume inside `pool`.

        The pool and protection domain identifiers always come from `pool`,
        overriding any values present in `params`.
        """
        pool_id = pool.get("id")
        if not pool_id:
            raise ResolutionError("Storage pool object has no 'id'")

        body = dict(params)
        body["storagePoolId"] = pool_id
        body["protectionDomainId"] = pool.get("protectionDomainId")
        return self._expect_object(self._post(VOLUME_CREATE_PATH, body), "volume creation")
