"""Remote node deployment."""

from .actions import ACTION_HANDLERS
from .target import Target

__all__ = ["ACTION_HANDLERS", "Target"]
