"""Node collections, field normalization and path generation."""

from .fields import FieldKind, FieldNormalizer, ReferenceSet, classify_field, create_key, normalize_fields
from .paths import RouteTemplate, make_path, normalize_path, resolve_route_params
from .content_type import ContentTypeCollection

__all__ = [
    "ContentTypeCollection",
    "FieldKind",
    "FieldNormalizer",
    "ReferenceSet",
    "RouteTemplate",
    "classify_field",
    "create_key",
    "make_path",
    "normalize_fields",
    "normalize_path",
    "resolve_route_params"
]
