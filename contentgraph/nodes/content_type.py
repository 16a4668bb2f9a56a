"""
Node lifecycle management for a single content type.

A ContentTypeCollection creates, updates and removes the nodes of one
content type. It normalizes node fields, derives display fields and paths,
and keeps the global node index of its store in sync. Every change is
reported to subscribed listeners as ``(new_node, old_node)``.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..config import config
from ..errors import DuplicatePathError, NodeNotFoundError, TransformerNotFoundError
from ..models import IndexEntry, Node, NodeInternal
from ..schema import infer_types
from ..utils import camel_case, make_uid, slugify, utc_now_iso
from .fields import ReferenceSet, normalize_fields
from .paths import RouteTemplate, make_path, normalize_path


NodeListener = Callable[[Optional[Node], Optional[Node]], None]

DISPLAY_FIELDS = ("title", "date", "slug", "content", "excerpt")


class ContentTypeCollection:
    """
    Manages the nodes of one content type inside a ContentStore.
    """

    def __init__(
        self,
        store: Any,
        type_name: str,
        route: Optional[str] = None,
        route_template: Optional[RouteTemplate] = None,
        refs: Optional[Dict[str, Dict[str, Any]]] = None,
        fields: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
        resolve_absolute_paths: Optional[bool] = None,
    ):
        """
        Initialize the content type.

        Args:
            store: The ContentStore owning the global node index
            type_name: Name of the content type
            route: Route with colon parameters, e.g. ``/blog/:year/:slug``
            route_template: Precompiled route template, takes precedence
                over ``route``
            refs: Fields always holding references, ``{field: {"type_name": ...}}``
            fields: Schema fields declared by the source plugin
            description: Human readable description of the type
            resolve_absolute_paths: Resolve file paths in fields to absolute
                paths, defaults to the configured value
        """
        self.store = store
        self.type_name = type_name
        self.description = description

        if resolve_absolute_paths is None:
            resolve_absolute_paths = config.resolve_absolute_paths
        self.resolve_absolute_paths = resolve_absolute_paths

        if route_template is None:
            route_template = RouteTemplate.from_route(route or config.default_route)
        self.route_template = route_template

        self.refs: Dict[str, Dict[str, Any]] = {}
        self.schema_fields: Dict[str, Any] = {}
        self.mime_types: Dict[str, Any] = {}

        for field_name, options in (refs or {}).items():
            self.add_reference(field_name, options)
        for field_name, options in (fields or {}).items():
            self.add_schema_field(field_name, options)

        self._nodes: Dict[str, Node] = {}
        self._listeners: List[NodeListener] = []

    # Configuration

    def add_reference(self, field_name: str, options: Dict[str, Any]) -> None:
        """
        Declare a field that always holds ids of another content type.

        Args:
            field_name: Name of the field
            options: ``{"type_name": "Author"}``, type name may be a list
        """
        self.refs[camel_case(field_name)] = options

    def add_schema_field(self, field_name: str, options: Any) -> None:
        """Declare a schema field overriding the inferred one."""
        self.schema_fields[camel_case(field_name)] = options

    # Observers

    def subscribe(self, listener: NodeListener) -> NodeListener:
        """
        Register a listener called with ``(new_node, old_node)`` on changes.

        Returns:
            The listener, for later unsubscribing
        """
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: NodeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, node: Optional[Node], old_node: Optional[Node] = None) -> None:
        for listener in list(self._listeners):
            listener(node, old_node)

    # Lifecycle

    def add_node(self, options: Optional[Dict[str, Any]] = None) -> Optional[Node]:
        """
        Create a node and add it to the collection.

        Args:
            options: Node options (id, title, date, slug, content, excerpt,
                path, fields and internal)

        Returns:
            The new node, or None if its path or id is already taken
        """
        node, belongs_to = self.create_node(options)

        # register the transformer for the schema to know which
        # fields its output adds to this content type
        mime_type = node.internal.mime_type
        if mime_type and mime_type not in self.mime_types:
            self.mime_types[mime_type] = self.store.transformers.get(mime_type)

        try:
            self.store.insert_index_entry(IndexEntry(
                type="node",
                path=node.path,
                type_name=node.type_name,
                uid=node.uid,
                id=node.id,
                belongs_to=belongs_to.to_dict()
            ))
        except DuplicatePathError:
            if node.id in self._nodes:
                logging.warning(f"Skipping duplicate id {node.id} for {self.type_name}")
            else:
                logging.warning(f"Skipping duplicate path for {node.path} ({self.type_name})")
            return None

        self._nodes[node.id] = node
        self._notify(node, None)

        return node

    def create_node(self, options: Optional[Dict[str, Any]] = None) -> Tuple[Node, ReferenceSet]:
        """
        Build a node without adding it to the collection or the index.

        Returns:
            Tuple of the node and the references found in its fields

        Raises:
            TransformerNotFoundError: The node has a mime type no
                transformer is registered for
        """
        options = dict(options or {})
        internal = self._create_internals(options.get("internal"))

        node_id = options.get("id")
        if node_id is None or node_id == "":
            node_id = make_uid(json.dumps(_with_string_keys(options), sort_keys=True, default=str))
        node_id = str(node_id)

        self._transform_node_options(options, internal)

        fields, belongs_to = self._process_node_fields(options.get("fields"), internal.origin)

        title = options.get("title") or fields.get("title") or node_id
        node = Node(
            id=node_id,
            uid=make_uid(self.type_name + node_id),
            type_name=self.type_name,
            internal=internal,
            title=title,
            date=options.get("date") or fields.get("date") or utc_now_iso(),
            slug=str(options.get("slug") or fields.get("slug") or slugify(title)),
            content=options.get("content") or fields.get("content") or "",
            excerpt=options.get("excerpt") or fields.get("excerpt") or "",
            fields=fields,
            with_path=isinstance(options.get("path"), str)
        )
        node.path = self._resolve_path(node, options.get("path"))

        return node, belongs_to

    def get_node(self, node_id: Any) -> Optional[Node]:
        """
        Get a node by id.

        Returns:
            The node if found, None otherwise
        """
        return self._nodes.get(str(node_id))

    def update_node(self, node_id: Any, options: Optional[Dict[str, Any]] = None) -> Node:
        """
        Update an existing node in place.

        Display fields missing from the options and the normalized fields
        keep their previous values. The path is regenerated unless given.

        Raises:
            NodeNotFoundError: No node with this id exists
            DuplicatePathError: The new path belongs to another node
            TransformerNotFoundError: The node has a mime type no
                transformer is registered for
        """
        node = self.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(self.type_name, str(node_id))

        options = dict(options or {})
        old_node = node.model_copy(deep=True)
        internal = self._create_internals(options.get("internal"), node.internal)

        self._transform_node_options(options, internal)

        fields, belongs_to = self._process_node_fields(options.get("fields"), internal.origin)

        values: Dict[str, Any] = {
            name: options.get(name) or fields.get(name) or getattr(node, name)
            for name in DISPLAY_FIELDS
        }
        values["slug"] = str(values["slug"])

        updated = node.model_copy(update=dict(
            values,
            internal=internal,
            fields=fields,
            with_path=isinstance(options.get("path"), str)
        ))
        updated.path = self._resolve_path(updated, options.get("path"))

        self.store.update_index_entry(node.uid, updated.path, belongs_to.to_dict())

        for name in type(node).model_fields:
            setattr(node, name, getattr(updated, name))

        self._notify(node, old_node)

        return node

    def remove_node(self, node_id: Any) -> None:
        """
        Remove a node and its index entry.

        Raises:
            NodeNotFoundError: No node with this id exists
        """
        node = self.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(self.type_name, str(node_id))

        self.store.remove_index_entry(node.uid)
        del self._nodes[node.id]

        self._notify(None, node)

    # Queries

    def nodes(self) -> List[Node]:
        """Return all nodes in insertion order."""
        return list(self._nodes.values())

    def infer_types(self) -> Dict[str, Any]:
        """
        Infer the field types of all nodes.

        Declared schema fields replace inferred ones.
        """
        result: Dict[str, Any] = dict(infer_types(self._nodes.values(), self.type_name))
        result.update(self.schema_fields)
        return result

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes())

    def __contains__(self, node_id: object) -> bool:
        return str(node_id) in self._nodes

    # Helpers

    def _create_internals(self, options: Optional[Dict[str, Any]] = None,
                          previous: Optional[NodeInternal] = None) -> NodeInternal:
        options = options or {}

        def pick(name: str) -> Any:
            if name in options:
                return options[name]
            return getattr(previous, name) if previous is not None else None

        return NodeInternal(
            origin=pick("origin"),
            mime_type=pick("mime_type"),
            content=pick("content"),
            timestamp=int(time.time() * 1000)
        )

    def _transform_node_options(self, options: Dict[str, Any], internal: NodeInternal) -> None:
        """
        Fill node options from the transformed raw content.

        Values given in the options are never replaced.
        """
        if not internal.mime_type:
            return

        if internal.mime_type not in self.store.transformers:
            raise TransformerNotFoundError(internal.mime_type)

        if not internal.content:
            return

        result = self.store.transformers.parse(internal.mime_type, internal.content)

        for key, value in result.node_options().items():
            if key == "fields":
                options["fields"] = {**value, **(options.get("fields") or {})}
            elif not options.get(key):
                options[key] = value

    def _process_node_fields(self, fields: Optional[Dict[str, Any]],
                             origin: Optional[str]) -> Tuple[Dict[str, Any], ReferenceSet]:
        return normalize_fields(
            fields,
            origin=origin,
            resolve_path=self._resolve_file_path,
            refs=self.refs
        )

    def _resolve_file_path(self, origin: Optional[str], value: str) -> str:
        return self.store.resolve_file_path(origin, value, self.resolve_absolute_paths)

    def _resolve_path(self, node: Node, path: Any) -> str:
        if isinstance(path, str):
            return normalize_path(path)
        return make_path(node, self.route_template)

    def __repr__(self) -> str:
        return f"ContentTypeCollection({self.type_name!r}, nodes={len(self._nodes)})"


def _with_string_keys(value: Any) -> Any:
    # json.dumps cannot sort mixed int and str keys
    if isinstance(value, dict):
        return {str(key): _with_string_keys(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_with_string_keys(item) for item in value]
    return value
