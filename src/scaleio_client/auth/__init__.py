"""Authentication strategies for the ScaleIO gateway."""
from .base import AuthStrategy
from .token import TokenAuth

__all__ = ["AuthStrategy", "TokenAuth"]
