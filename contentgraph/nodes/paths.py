"""
Path generation for contentgraph nodes.

A content type owns a route template: the ordered names of its route
parameters and a function building a path from resolved parameter values.
This module resolves the parameter values for a node; it knows nothing about
the route syntax itself.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from ..models import Node
from ..utils import parse_iso_date, slugify


_ROUTE_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_REPEATED_SLASHES_RE = re.compile(r"/{2,}")
_CAMEL_HUMP_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")

RAW_SUFFIX = "_raw"

DATE_PARAMS = {
    "year": "%Y",
    "month": "%m",
    "day": "%d",
}


@dataclass
class RouteTemplate:
    """
    Route parameter names plus a function building a path from them.
    """
    route_keys: List[str]
    make_path: Callable[[Dict[str, str]], str]
    route: Optional[str] = field(default=None)

    @classmethod
    def from_route(cls, route: str) -> "RouteTemplate":
        """
        Compile a route with colon parameters, e.g. ``/blog/:year/:slug``.

        A ``:name_raw`` parameter is filled with the unslugified value of
        ``name``.
        """
        route_keys: List[str] = []

        for name in _ROUTE_PARAM_RE.findall(route):
            if name.endswith(RAW_SUFFIX):
                name = name[:-len(RAW_SUFFIX)]
            if name not in route_keys:
                route_keys.append(name)

        def make_path(params: Dict[str, str]) -> str:
            return _ROUTE_PARAM_RE.sub(
                lambda m: quote(str(params.get(m.group(1), "")), safe=""),
                route
            )

        return cls(route_keys=route_keys, make_path=make_path, route=route)


def normalize_path(path: str) -> str:
    """Ensure a path starts with exactly one slash and has no empty segments."""
    path = _REPEATED_SLASHES_RE.sub("/", str(path))
    return "/" + path.lstrip("/")


def _node_attribute(node: Node, key: str) -> Any:
    name = _CAMEL_HUMP_RE.sub(r"_\1", key).lower()
    if name in type(node).model_fields:
        return getattr(node, name)
    return None


def _is_scalar_reference(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and "typeName" in value
        and "id" in value
        and not isinstance(value["id"], (list, tuple))
    )


def resolve_route_params(node: Node, route_keys: List[str]) -> Dict[str, str]:
    """
    Resolve the route parameter values of a node.

    Root level fields are used as route params, then node attributes, then
    the parameter name itself. Primitive values are slugified; the original
    value is available under the same name with a ``_raw`` suffix.
    """
    date = parse_iso_date(node.date)
    params: Dict[str, str] = {}

    for key in route_keys:
        if date is not None and key in DATE_PARAMS:
            params[key] = date.strftime(DATE_PARAMS[key])
            continue

        value = node.fields.get(key) or _node_attribute(node, key) or key

        if _is_scalar_reference(value):
            params[key] = str(value["id"])
        elif not isinstance(value, (dict, list, tuple)) and not params.get(key):
            params[key] = slugify(str(value))
            params[key + RAW_SUFFIX] = str(value)

    return params


def make_path(node: Node, template: RouteTemplate) -> str:
    """Generate the path of a node from a route template."""
    params = resolve_route_params(node, template.route_keys)
    return normalize_path(template.make_path(params))
