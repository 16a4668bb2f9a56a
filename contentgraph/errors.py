"""
Exceptions raised by the content graph store.
"""


class ContentGraphError(Exception):
    """Base class for all content graph errors."""


class TransformerNotFoundError(ContentGraphError):
    """Raised when a node declares a mime type nobody can parse."""

    def __init__(self, mime_type: str):
        super().__init__(f"No transformer for {mime_type} is installed.")
        self.mime_type = mime_type


class NodeNotFoundError(ContentGraphError, KeyError):
    """Raised when updating or removing a node that does not exist."""

    def __init__(self, type_name: str, node_id: str):
        super().__init__(f"No {type_name} node with id '{node_id}'")
        self.type_name = type_name
        self.node_id = node_id

    def __str__(self) -> str:
        return self.args[0]


class DuplicatePathError(ContentGraphError):
    """Raised when an index entry would collide with an existing one."""

    def __init__(self, path: str, uid: str):
        super().__init__(f"Duplicate path {path} (uid {uid})")
        self.path = path
        self.uid = uid


class ContentTypeExistsError(ContentGraphError):
    """Raised when a content type is registered twice on one store."""
