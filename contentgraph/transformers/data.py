"""
Transformers for structured data files.

JSON and YAML documents are parsed into a mapping. Well-known node keys are
lifted out of it; everything else becomes custom fields.
"""

import json
from typing import Any, Dict, Optional

import yaml

from ..models import TransformResult
from .base import BaseTransformer


NODE_KEYS = ("title", "slug", "path", "date", "content", "excerpt")


def _to_result(data: Any) -> TransformResult:
    if data is None:
        return TransformResult()

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the document root, got {type(data).__name__}")

    fields = {key: value for key, value in data.items() if key not in NODE_KEYS}
    values = {key: data[key] for key in NODE_KEYS if key in data}

    return TransformResult(fields=fields, **values)


class JSONTransformer(BaseTransformer):
    """Parses JSON documents."""

    mime_types = ["application/json"]

    def parse(self, content: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        return _to_result(json.loads(content))


class YAMLTransformer(BaseTransformer):
    """Parses YAML documents."""

    mime_types = ["text/yaml", "application/x-yaml"]

    def parse(self, content: str, options: Optional[Dict[str, Any]] = None) -> TransformResult:
        return _to_result(yaml.safe_load(content))
