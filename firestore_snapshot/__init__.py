# firestore_snapshot/__init__.py
from typing import List, Type

from .codec import decode, encode
from .enums import FirestoreOperators, OrderByDirection, SnapshotTimestampKey
from .exceptions import DocumentNotFoundError, FieldResolutionError, FirestoreSnapshotError, InvalidPathError
from .firestore_client import FirestoreDB
from .firestore_fields import Condition, FieldNameReferable, FirestoreField
from .firestore_model import HasTimestamps, SnapshotData, has_timestamps
from .paths import CollectionPath, DocumentPath
from .query_builder import QueryBuilder
from .references import Reference
from .snapshot import Snapshot


def init_firestore_snapshot(database: FirestoreDB, document_models: List[Type[SnapshotData]]):
    """Bind every model to ``database`` and install its field accessors.

    A subclass declared afterwards keeps its parent's field definitions but
    has no accessors of its own until it is registered too.
    """
    for model in document_models:
        model.initialize_db(database)
        if issubclass(model, FieldNameReferable):
            model.initialize_fields()


__all__ = [
    "SnapshotData",
    "HasTimestamps",
    "has_timestamps",
    "FieldNameReferable",
    "FirestoreField",
    "Condition",
    "DocumentPath",
    "CollectionPath",
    "Reference",
    "Snapshot",
    "QueryBuilder",
    "FirestoreDB",
    "FirestoreOperators",
    "OrderByDirection",
    "SnapshotTimestampKey",
    "FirestoreSnapshotError",
    "DocumentNotFoundError",
    "FieldResolutionError",
    "InvalidPathError",
    "encode",
    "decode",
    "init_firestore_snapshot",
]
