"""Storage pool helpers."""

from __future__ import annotations

from typing import Any

from .base import ResourceBase


class StoragePoolsResource(ResourceBase):
    """Work with ScaleIO storage pools."""

    def list(self) -> list[dict[str, Any]]:
        return self._expect_list(self._get("/api/types/StoragePool/instances"), "storage pool list")

    def get(self, pool_id: str) -> dict[str, Any]:
        return self._expect_object(
            self._get(f"/api/instances/StoragePool::{pool_id}"), "storage pool"
        )

    def get_by_name(self, name: str) -> dict[str, Any] | None:
        """Find a storage pool by its name.

        Args:
            name: The name of the storage pool.

        Returns:
            The pool object if found, else None.
        """
        for pool in self.list():
            if pool.get("name") == name:
                return pool
        return None
