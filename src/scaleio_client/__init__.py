"""High-level ScaleIO client entrypoints."""
from .client import ScaleIOClient
from .config import ClientConfig
from .exceptions import ScaleIOError
from .sdc import MappedVolume, get_local_volume_map

__all__ = ["ScaleIOClient", "ClientConfig", "ScaleIOError", "MappedVolume", "get_local_volume_map"]
