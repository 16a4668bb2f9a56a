"""
Content store for contentgraph.

This module holds the content types of a site and the global node index.
The index lives in DuckDB and enforces that every node path is unique
across all content types.
"""

import duckdb
import json
import logging
from typing import Any, Callable, Dict, List, Optional

from ..config import config
from ..errors import ContentTypeExistsError, DuplicatePathError
from ..models import IndexEntry, Node
from ..nodes import ContentTypeCollection
from ..schema import FieldType
from ..transformers import JSONTransformer, TransformerRegistry, YAMLTransformer
from ..utils import resolve_file_path as default_resolve_file_path


FilePathResolver = Callable[[Optional[str], str, bool], str]

_INDEX_COLUMNS = "uid, type, path, type_name, id, belongs_to"


class ContentStore:
    """
    Owns the content types of a site and the DuckDB node index they share.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        transformers: Optional[TransformerRegistry] = None,
        resolve_file_path: Optional[FilePathResolver] = None,
    ):
        """
        Initialize the content store.

        Args:
            db_path: Path to the DuckDB database file, defaults to the
                configured path (in memory unless configured otherwise)
            transformers: Registry of content transformers, defaults to the
                built-in JSON and YAML transformers
            resolve_file_path: Resolver for relative file paths found in
                node fields, called with ``(origin, path, resolve_absolute)``
        """
        self.db_path = db_path or config.database_path
        self.connection = None

        if transformers is None:
            transformers = TransformerRegistry([JSONTransformer(), YAMLTransformer()])
        self.transformers = transformers
        self.resolve_file_path = resolve_file_path or default_resolve_file_path

        self._content_types: Dict[str, ContentTypeCollection] = {}

    def connect(self):
        """Establish connection to the database."""
        self.connection = duckdb.connect(self.db_path)

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        self.initialize_database()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection

    def initialize_database(self):
        """
        Create the node index table if it doesn't exist.
        """
        connection = self._require_connection()

        connection.execute("""
            CREATE TABLE IF NOT EXISTS node_index (
                uid VARCHAR PRIMARY KEY,
                type VARCHAR NOT NULL,
                path VARCHAR NOT NULL UNIQUE,
                type_name VARCHAR NOT NULL,
                id VARCHAR NOT NULL,
                belongs_to VARCHAR NOT NULL
            )
        """)

    # Content types

    def add_content_type(self, type_name: str, **options: Any) -> ContentTypeCollection:
        """
        Register a new content type.

        Args:
            type_name: Name of the content type
            **options: Passed on to ContentTypeCollection (route,
                route_template, refs, fields, description,
                resolve_absolute_paths)

        Returns:
            The new content type

        Raises:
            ContentTypeExistsError: A content type with this name exists
        """
        if type_name in self._content_types:
            raise ContentTypeExistsError(f"Content type {type_name} already exists")

        collection = ContentTypeCollection(self, type_name, **options)
        self._content_types[type_name] = collection
        logging.info(f"Added content type {type_name}")

        return collection

    def get_content_type(self, type_name: str) -> Optional[ContentTypeCollection]:
        return self._content_types.get(type_name)

    def list_content_types(self) -> List[str]:
        return list(self._content_types.keys())

    # Node index

    def insert_index_entry(self, entry: IndexEntry) -> None:
        """
        Add a node to the global index.

        Raises:
            DuplicatePathError: The path or uid is already indexed
        """
        connection = self._require_connection()

        try:
            connection.execute(f"""
                INSERT INTO node_index ({_INDEX_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
            """, _entry_params(entry))
        except (duckdb.ConstraintException, duckdb.IntegrityError) as e:
            raise DuplicatePathError(entry.path, entry.uid) from e

    def get_index_entry(self, uid: str) -> Optional[IndexEntry]:
        """
        Retrieve an index entry by node uid.

        Returns:
            The entry if found, None otherwise
        """
        connection = self._require_connection()

        row = connection.execute(f"""
            SELECT {_INDEX_COLUMNS} FROM node_index WHERE uid = ?
        """, [uid]).fetchone()

        return _row_to_entry(row) if row else None

    def find_index_entry(self, path: str) -> Optional[IndexEntry]:
        """
        Retrieve an index entry by node path.

        Returns:
            The entry if found, None otherwise
        """
        connection = self._require_connection()

        row = connection.execute(f"""
            SELECT {_INDEX_COLUMNS} FROM node_index WHERE path = ?
        """, [path]).fetchone()

        return _row_to_entry(row) if row else None

    def update_index_entry(self, uid: str, path: str, belongs_to: Dict[str, Dict[str, bool]]) -> IndexEntry:
        """
        Update the path and references of an indexed node.

        Raises:
            KeyError: The uid is not indexed
            DuplicatePathError: The path belongs to another node
        """
        connection = self._require_connection()

        entry = self.get_index_entry(uid)
        if entry is None:
            raise KeyError(uid)

        if entry.path == path:
            connection.execute("""
                UPDATE node_index SET belongs_to = ? WHERE uid = ?
            """, [_dump_belongs_to(belongs_to), uid])
            return entry.model_copy(update={"belongs_to": belongs_to})

        owner = self.find_index_entry(path)
        if owner is not None:
            raise DuplicatePathError(path, uid)

        # the path column is indexed, so replace the row instead of
        # updating it in place
        updated = entry.model_copy(update={"path": path, "belongs_to": belongs_to})
        connection.execute("DELETE FROM node_index WHERE uid = ?", [uid])
        connection.execute(f"""
            INSERT INTO node_index ({_INDEX_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?)
        """, _entry_params(updated))

        return updated

    def remove_index_entry(self, uid: str) -> bool:
        """
        Remove a node from the global index.

        Returns:
            True if an entry was removed, False if the uid was not indexed
        """
        connection = self._require_connection()

        if self.get_index_entry(uid) is None:
            return False

        connection.execute("DELETE FROM node_index WHERE uid = ?", [uid])
        return True

    def list_index_entries(self, type_name: Optional[str] = None) -> List[IndexEntry]:
        """
        List all index entries, optionally filtered by content type.
        """
        connection = self._require_connection()

        if type_name:
            rows = connection.execute(f"""
                SELECT {_INDEX_COLUMNS} FROM node_index
                WHERE type_name = ?
                ORDER BY path
            """, [type_name]).fetchall()
        else:
            rows = connection.execute(f"""
                SELECT {_INDEX_COLUMNS} FROM node_index
                ORDER BY path
            """).fetchall()

        return [_row_to_entry(row) for row in rows]

    # Lookups across content types

    def get_node_by_uid(self, uid: str) -> Optional[Node]:
        entry = self.get_index_entry(uid)
        return self._node_for_entry(entry) if entry else None

    def get_node_by_path(self, path: str) -> Optional[Node]:
        entry = self.find_index_entry(path)
        return self._node_for_entry(entry) if entry else None

    def find_belongs_to(self, type_name: str, node_id: Any) -> List[IndexEntry]:
        """
        Find the nodes referencing a node.

        Args:
            type_name: Content type of the referenced node
            node_id: Id of the referenced node

        Returns:
            Index entries of all nodes referencing it
        """
        node_id = str(node_id)
        return [
            entry for entry in self.list_index_entries()
            if node_id in entry.belongs_to.get(type_name, {})
        ]

    def infer_schema(self) -> Dict[str, Dict[str, FieldType]]:
        """
        Infer the field types of every content type.

        Returns:
            Mapping of type name to its field types
        """
        return {
            type_name: collection.infer_types()
            for type_name, collection in self._content_types.items()
        }

    def _node_for_entry(self, entry: IndexEntry) -> Optional[Node]:
        collection = self._content_types.get(entry.type_name)
        return collection.get_node(entry.id) if collection else None


def _dump_belongs_to(belongs_to: Dict[str, Dict[str, bool]]) -> str:
    return json.dumps(belongs_to, sort_keys=True)


def _entry_params(entry: IndexEntry) -> List[Any]:
    return [
        entry.uid,
        entry.type,
        entry.path,
        entry.type_name,
        entry.id,
        _dump_belongs_to(entry.belongs_to)
    ]


def _row_to_entry(row) -> IndexEntry:
    return IndexEntry(
        uid=row[0],
        type=row[1],
        path=row[2],
        type_name=row[3],
        id=row[4],
        belongs_to=json.loads(row[5])
    )
