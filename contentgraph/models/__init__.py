"""Data models for contentgraph."""

from .node import Node, NodeInternal, Reference, IndexEntry
from .transform import TransformResult

__all__ = [
    "Node",
    "NodeInternal",
    "Reference",
    "IndexEntry",
    "TransformResult"
]
