"""
Structural type descriptors produced by schema inference.

These are consumed by the schema binding layer, which maps them onto the
types of its query language.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union


class ScalarKind(str, Enum):
    """Scalar kinds a field value can infer to."""
    STRING = "string"
    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    DATE = "date"


@dataclass(frozen=True)
class ScalarType:
    kind: ScalarKind

    @property
    def name(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class ListType:
    of_type: "OutputType"

    @property
    def name(self) -> str:
        return f"[{self.of_type.name}]"


@dataclass
class ObjectType:
    """
    A named structural type for nested objects.

    Fields whose value never determined a type map to None.
    """
    name: str
    fields: Dict[str, Optional["FieldType"]] = field(default_factory=dict)


OutputType = Union[ScalarType, ListType, ObjectType]

Resolver = Callable[[Dict[str, Any], str], Any]


def resolve_list(source: Dict[str, Any], field_name: str) -> List[Any]:
    """Return the field value if it is a list, otherwise an empty list."""
    value = source.get(field_name) if isinstance(source, dict) else None
    return value if isinstance(value, list) else []


def resolve_object(source: Dict[str, Any], field_name: str) -> Any:
    """Return the nested object stored under the field."""
    return source.get(field_name) if isinstance(source, dict) else None


@dataclass
class FieldType:
    """
    An inferred output type with an optional resolver.

    The resolver receives the fields of the owning object and the field name.
    """
    type: OutputType
    resolve: Optional[Resolver] = None

    def resolve_value(self, source: Dict[str, Any], field_name: str) -> Any:
        if self.resolve is not None:
            return self.resolve(source, field_name)
        return source.get(field_name) if isinstance(source, dict) else None


STRING = ScalarType(ScalarKind.STRING)
BOOLEAN = ScalarType(ScalarKind.BOOLEAN)
INT = ScalarType(ScalarKind.INT)
FLOAT = ScalarType(ScalarKind.FLOAT)
DATE = ScalarType(ScalarKind.DATE)
