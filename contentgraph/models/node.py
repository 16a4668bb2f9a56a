"""
Node models for contentgraph.

This module defines the records kept for every piece of content added by a
source plugin, and the global index entries shared by all content types.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


class NodeInternal(BaseModel):
    """
    Provenance and raw-content metadata of a node.

    Never part of the public schema.
    """

    origin: Optional[str] = Field(
        None,
        description="Path of the file or resource the node was created from"
    )

    mime_type: Optional[str] = Field(
        None,
        description="Mime type of the raw content, selects the transformer"
    )

    content: Optional[str] = Field(
        None,
        description="Raw, untransformed content"
    )

    timestamp: int = Field(
        ...,
        description="Ingestion time in milliseconds since epoch"
    )


class Node(BaseModel):
    """
    A single content record of a given content type.
    """

    id: str = Field(
        ...,
        description="Identifier of the node, unique within its content type"
    )

    uid: str = Field(
        ...,
        description="Fingerprint of type name and id, unique across the store"
    )

    type_name: str = Field(
        ...,
        description="Name of the content type the node belongs to"
    )

    internal: NodeInternal = Field(
        ...,
        description="Provenance metadata"
    )

    title: Any = Field(None, description="Display title")
    date: Any = Field(None, description="Publication date, ISO 8601")
    slug: str = Field("", description="URL-safe form of the title")
    content: Any = Field("", description="Transformed content")
    excerpt: Any = Field("", description="Short summary of the content")

    fields: Dict[str, Any] = Field(
        default_factory=dict,
        description="Normalized custom fields with sanitized keys"
    )

    path: str = Field(
        "",
        description="URL path, unique across all content types"
    )

    with_path: bool = Field(
        False,
        description="Whether the path was supplied instead of generated"
    )


class Reference(BaseModel):
    """
    A typed pointer from a node field to one or more other nodes.

    In node fields a reference is written as a plain mapping with exactly
    the keys ``typeName`` and ``id``.
    """

    type_name: Union[str, List[str]] = Field(
        ...,
        description="Referenced content type, or a list of candidate types"
    )

    id: Any = Field(
        ...,
        description="Referenced id, or a list of ids"
    )

    @classmethod
    def from_field(cls, value: Dict[str, Any]) -> "Reference":
        """Build a reference from its ``{"typeName": ..., "id": ...}`` form."""
        return cls(type_name=value["typeName"], id=value["id"])

    def type_names(self) -> List[str]:
        """Return the referenced type names as a list."""
        if isinstance(self.type_name, list):
            return list(self.type_name)
        return [self.type_name]

    def ids(self) -> List[Any]:
        """Return the referenced ids as a list."""
        if isinstance(self.id, (list, tuple)):
            return list(self.id)
        return [self.id]


class IndexEntry(BaseModel):
    """
    Global record enforcing path uniqueness across content types.
    """

    type: str = Field("node", description="Kind of indexed record")

    path: str = Field(..., description="URL path of the node")

    type_name: str = Field(..., description="Content type of the node")

    uid: str = Field(..., description="Store-wide unique node fingerprint")

    id: str = Field(..., description="Node id within its content type")

    belongs_to: Dict[str, Dict[str, bool]] = Field(
        default_factory=dict,
        description="Referenced ids grouped by content type"
    )
