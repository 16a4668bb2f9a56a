"""
Transformer Registry for contentgraph.

Keeps track of which transformer parses which mime type. Content types look
transformers up here when a node carries raw content.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..errors import TransformerNotFoundError
from ..models import TransformResult
from .base import BaseTransformer


class TransformerRegistry:
    """
    Registry of content transformers keyed by mime type.
    """

    def __init__(self, transformers: Optional[Iterable[BaseTransformer]] = None):
        """
        Initialize the registry.

        Args:
            transformers: Transformers to register for their own mime types
        """
        self._transformers: Dict[str, BaseTransformer] = {}
        for transformer in transformers or []:
            self.register(transformer)

    def register(self, transformer: BaseTransformer, mime_types: Optional[List[str]] = None) -> None:
        """
        Register a transformer.

        Args:
            transformer: The transformer to register
            mime_types: Mime types to register it for, defaults to the
                transformer's own ``mime_types``
        """
        for mime_type in mime_types or transformer.mime_types:
            if mime_type in self._transformers:
                logging.info(f"Replacing transformer for {mime_type}")
            self._transformers[mime_type] = transformer

    def get(self, mime_type: str) -> Optional[BaseTransformer]:
        """
        Get the transformer for a mime type.

        Returns:
            The transformer, or None if none is registered
        """
        return self._transformers.get(mime_type)

    def parse(self, mime_type: str, content: str, options: Optional[dict] = None) -> TransformResult:
        """
        Parse content with the transformer registered for its mime type.

        Raises:
            TransformerNotFoundError: No transformer handles the mime type
        """
        transformer = self.get(mime_type)

        if transformer is None:
            raise TransformerNotFoundError(mime_type)

        return transformer.parse(content, options)

    def list_mime_types(self) -> List[str]:
        return list(self._transformers.keys())

    def __contains__(self, mime_type: object) -> bool:
        return mime_type in self._transformers

    def __len__(self) -> int:
        return len(self._transformers)
