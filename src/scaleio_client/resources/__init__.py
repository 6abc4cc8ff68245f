"""Resource-specific convenience wrappers."""
from .base import find_link
from .pools import StoragePoolsResource
from .volumes import VolumesResource

__all__ = ["StoragePoolsResource", "VolumesResource", "find_link"]
