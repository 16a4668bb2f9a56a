"""
Field normalization for contentgraph nodes.

Custom node fields come from arbitrary data sources. Before a node is stored
its fields are walked recursively: keys are sanitized into identifiers the
schema can use, relative file paths are resolved against the node origin and
references to other nodes are collected into a ReferenceSet.
"""

import re
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..models import Reference
from ..utils import INTERNAL_KEY_PREFIX, camel_case, is_resolvable_path


_NON_VALID_CHARS_RE = re.compile(r"[^a-zA-Z0-9_]")
_LEADING_NUMBER_RE = re.compile(r"^([0-9])")

REFERENCE_KEYS = frozenset(("typeName", "id"))

PathResolver = Callable[[Optional[str], str], str]


class FieldKind(str, Enum):
    """The variants a field value is classified into."""

    SCALAR = "scalar"
    LIST = "list"
    REFERENCE = "reference"
    OBJECT = "object"


def is_reference(value: Any) -> bool:
    """
    Check whether a value is a reference to other nodes.

    A reference is a mapping with exactly the keys ``typeName`` and ``id``.
    """
    if not isinstance(value, dict) or set(value.keys()) != REFERENCE_KEYS:
        return False

    type_name = value["typeName"]
    if isinstance(type_name, list):
        return all(isinstance(name, str) for name in type_name)
    return isinstance(type_name, str)


def classify_field(value: Any) -> FieldKind:
    """Classify a field value into exactly one FieldKind."""
    if isinstance(value, (list, tuple)):
        return FieldKind.LIST
    if is_reference(value):
        return FieldKind.REFERENCE
    if isinstance(value, dict):
        return FieldKind.OBJECT
    return FieldKind.SCALAR


def create_key(key: str) -> str:
    """
    Sanitize a field key into a camelCase identifier.

    Examples:
        create_key("Title")       # "title"
        create_key("my-key")      # "myKey"
        create_key("2nd place")   # "_2NdPlace"
    """
    key = _NON_VALID_CHARS_RE.sub("_", str(key))
    key = camel_case(key)
    key = _LEADING_NUMBER_RE.sub(r"_\1", key)
    return key


class ReferenceSet:
    """
    Referenced node ids of a single node, grouped by content type.
    """

    def __init__(self):
        self._refs: Dict[str, Dict[str, bool]] = {}

    def add(self, type_name: str, node_id: Any) -> None:
        """
        Register one referenced id, or every id of a list.

        Args:
            type_name: Name of the referenced content type
            node_id: A single id or a list of ids
        """
        ids = self._refs.setdefault(type_name, {})
        values = node_id if isinstance(node_id, (list, tuple)) else [node_id]

        for value in values:
            if value is not None:
                ids[str(value)] = True

    def add_reference(self, reference: Reference) -> None:
        """Register a reference once for every type name it names."""
        for type_name in reference.type_names():
            self.add(type_name, reference.id)

    def contains(self, type_name: str, node_id: Any) -> bool:
        return str(node_id) in self._refs.get(type_name, {})

    def type_names(self) -> List[str]:
        return list(self._refs.keys())

    def to_dict(self) -> Dict[str, Dict[str, bool]]:
        """Return a copy of the belongs-to map."""
        return {type_name: dict(ids) for type_name, ids in self._refs.items()}

    def __bool__(self) -> bool:
        return bool(self._refs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReferenceSet):
            return self._refs == other._refs
        if isinstance(other, dict):
            return self._refs == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"ReferenceSet({self._refs!r})"


class FieldNormalizer:
    """
    Normalizes the custom fields of one node.

    A normalizer is single use: it collects the references of the node it
    processes into ``self.belongs_to``.
    """

    def __init__(self, origin: Optional[str] = None, resolve_path: Optional[PathResolver] = None):
        """
        Args:
            origin: Path of the file the node was created from
            resolve_path: Callable turning ``(origin, relative_path)`` into
                the stored path. Strings are left untouched when omitted.
        """
        self.origin = origin
        self.resolve_path = resolve_path
        self.belongs_to = ReferenceSet()

    def process_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize the keys and values of a mapping."""
        result: Dict[str, Any] = {}

        for key, value in fields.items():
            if isinstance(key, str) and key.startswith(INTERNAL_KEY_PREFIX):
                # internal metadata, never part of the schema
                result[key] = value
                continue

            result[create_key(key)] = self.process_value(value)

        return result

    def process_value(self, value: Any) -> Any:
        kind = classify_field(value)

        if kind is FieldKind.LIST:
            return [self.process_value(item) for item in value]

        if kind is FieldKind.REFERENCE:
            self.belongs_to.add_reference(Reference.from_field(value))
            return self.process_fields(value)

        if kind is FieldKind.OBJECT:
            return self.process_fields(value)

        if isinstance(value, str) and self.resolve_path and is_resolvable_path(value):
            return self.resolve_path(self.origin, value)

        return value

    def collect_declared_refs(self, fields: Dict[str, Any], refs: Dict[str, Dict[str, Any]]) -> None:
        """
        Register fields that are declared to always hold references.

        Args:
            fields: Normalized fields of the node
            refs: Declared reference fields, ``{field_name: {"type_name": ...}}``
        """
        for field_name, options in refs.items():
            node_id = fields.get(field_name)
            if node_id is None:
                continue

            type_name = options.get("type_name") or options.get("typeName")
            for name in _as_list(type_name):
                self.belongs_to.add(name, node_id)


def normalize_fields(
    fields: Optional[Dict[str, Any]] = None,
    origin: Optional[str] = None,
    resolve_path: Optional[PathResolver] = None,
    refs: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Tuple[Dict[str, Any], ReferenceSet]:
    """
    Normalize raw node fields.

    Args:
        fields: Raw custom fields of the node
        origin: Path of the file the node was created from
        resolve_path: Resolver for relative file paths in string values
        refs: Declared reference fields of the content type

    Returns:
        Tuple of the normalized fields and the references found in them
    """
    normalizer = FieldNormalizer(origin, resolve_path)
    result = normalizer.process_fields(fields or {})

    if refs:
        normalizer.collect_declared_refs(result, refs)

    return result, normalizer.belongs_to


def _as_list(value: Any) -> Iterable[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return value
    return [value]
