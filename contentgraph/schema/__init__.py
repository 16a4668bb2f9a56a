"""Schema inference over node fields."""

from .types import FieldType, ListType, ObjectType, ScalarKind, ScalarType
from .infer import create_type_name, infer_type, infer_types

__all__ = [
    "FieldType",
    "ListType",
    "ObjectType",
    "ScalarKind",
    "ScalarType",
    "create_type_name",
    "infer_type",
    "infer_types"
]
