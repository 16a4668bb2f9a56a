"""Content transformers turning raw node content into structured data."""

from .base import BaseTransformer
from .registry import TransformerRegistry
from .data import JSONTransformer, YAMLTransformer

__all__ = ["BaseTransformer", "TransformerRegistry", "JSONTransformer", "YAMLTransformer"]
