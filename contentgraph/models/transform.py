"""
Transformer output model for contentgraph.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class TransformResult(BaseModel):
    """
    Structured data parsed out of raw node content by a transformer.

    Every value is optional; only the ones a transformer found are set.
    """

    title: Optional[Any] = Field(None, description="Title found in the content")
    slug: Optional[Any] = Field(None, description="Slug found in the content")
    path: Optional[Any] = Field(None, description="Path found in the content")
    date: Optional[Any] = Field(None, description="Date found in the content")
    content: Optional[Any] = Field(None, description="Transformed body")
    excerpt: Optional[Any] = Field(None, description="Excerpt of the body")

    fields: Dict[Any, Any] = Field(
        default_factory=dict,
        description="Any other structured values found in the content, keyed as parsed"
    )

    def node_options(self) -> Dict[str, Any]:
        """
        Return the non-empty values in the shape of node options.
        """
        options = {
            key: value
            for key, value in self.model_dump(exclude={"fields"}).items()
            if value
        }
        if self.fields:
            options["fields"] = dict(self.fields)
        return options
