"""Content store and the global node index."""

from .manager import ContentStore

__all__ = ["ContentStore"]
