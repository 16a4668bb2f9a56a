"""
contentgraph: the content graph store of a static-site build tool.

Collects nodes from arbitrary data sources, normalizes their fields, tracks
references between them, generates unique paths and infers a field schema.
"""

__version__ = "0.1.0"
__author__ = "contentgraph Project"

# Import main components
from .database import ContentStore
from .models import Node, NodeInternal, Reference, IndexEntry, TransformResult
from .nodes import ContentTypeCollection, ReferenceSet, RouteTemplate
from .schema import FieldType, infer_types
from .transformers import BaseTransformer, TransformerRegistry, JSONTransformer, YAMLTransformer
from .errors import (
    ContentGraphError,
    ContentTypeExistsError,
    DuplicatePathError,
    NodeNotFoundError,
    TransformerNotFoundError
)

__all__ = [
    "ContentStore",
    "ContentTypeCollection",
    "Node",
    "NodeInternal",
    "Reference",
    "IndexEntry",
    "TransformResult",
    "ReferenceSet",
    "RouteTemplate",
    "FieldType",
    "infer_types",
    "BaseTransformer",
    "TransformerRegistry",
    "JSONTransformer",
    "YAMLTransformer",
    "ContentGraphError",
    "ContentTypeExistsError",
    "DuplicatePathError",
    "NodeNotFoundError",
    "TransformerNotFoundError"
]
