"""
Base transformer interface for contentgraph.

This module defines the abstract interface that all content transformers must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional

from ..models import TransformResult


class BaseTransformer(ABC):
    """
    Abstract base class for all content transformers.

    Each transformer parses the raw content of a node in a specific format
    (JSON, YAML, Markdown, ...) into the standardized TransformResult.
    """

    mime_types: ClassVar[List[str]] = []

    @abstractmethod
    def parse(self, content: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        """
        Parse raw node content.

        Args:
            content: The raw content of the node
            options: Transformer specific options

        Returns:
            The structured values found in the content
        """
        pass
