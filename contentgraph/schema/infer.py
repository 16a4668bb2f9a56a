"""
Field type inference for contentgraph.

Derives a structural schema from the fields of every node of a content
type. Types are unified by last-write-wins: a later node silently replaces
the type inferred for a key by an earlier one.
"""

import math
from typing import Any, Dict, Iterable, Optional

from ..models import Node
from ..utils import INTERNAL_KEY_PREFIX, camel_case, is_date
from .types import (
    BOOLEAN,
    DATE,
    FLOAT,
    INT,
    STRING,
    FieldType,
    ListType,
    ObjectType,
    resolve_list,
    resolve_object,
)


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def infer_types(nodes: Iterable[Node], type_name: str) -> Dict[str, FieldType]:
    """
    Infer a field type for every field key of a list of nodes.

    Args:
        nodes: All nodes of the content type
        type_name: Name of the content type, used to name nested types

    Returns:
        Mapping of field key to inferred type. Keys no value ever
        determined a type for are left out.
    """
    fields: Dict[str, FieldType] = {}

    for node in nodes:
        for key, value in node.fields.items():
            if key.startswith(INTERNAL_KEY_PREFIX):
                continue

            field_type = infer_type(value, key, type_name)
            if field_type is not None:
                fields[key] = field_type

    return fields


def infer_type(value: Any, key: str, owner: str) -> Optional[FieldType]:
    """
    Infer the type of a single field value.

    Falsy values (None, False, 0, "") never determine a type. Lists infer
    from their first element only.
    """
    if _is_falsy(value):
        return None

    if isinstance(value, (list, tuple)):
        item_type = infer_type(value[0], key, owner)
        if item_type is None:
            return None
        return FieldType(ListType(item_type.type), resolve=resolve_list)

    if is_date(value):
        return FieldType(DATE)

    if isinstance(value, str):
        return FieldType(STRING)

    if isinstance(value, bool):
        return FieldType(BOOLEAN)

    if isinstance(value, (int, float)):
        return FieldType(INT if is_32bit_int(value) else FLOAT)

    if isinstance(value, dict):
        return create_object_type(value, key, owner)

    return None


def create_object_type(obj: Dict[str, Any], key: str, owner: str) -> FieldType:
    name = create_type_name(owner, key)
    fields = {
        field_key: infer_type(field_value, field_key, name)
        for field_key, field_value in obj.items()
        if not str(field_key).startswith(INTERNAL_KEY_PREFIX)
    }
    return FieldType(ObjectType(name, fields), resolve=resolve_object)


def create_type_name(owner: str, key: str) -> str:
    """Name a nested type after its owning type and field key."""
    return camel_case(f"{owner} {key}", pascal_case=True)


def is_32bit_int(value: Any) -> bool:
    """Check whether a number is an integer representable in 32 bits."""
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return False
        value = int(value)
    return INT32_MIN <= value <= INT32_MAX


def _is_falsy(value: Any) -> bool:
    """
    Check whether a value is too empty to infer a type from.

    Empty mappings count as empty too: an object type needs at least one
    field, so ``{}`` yields no type instead of a fieldless object.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False
