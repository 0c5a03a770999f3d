"""Error types raised by firestore_snapshot.

Configuration mistakes (no database bound to a model) keep raising
``RuntimeError`` and bad arguments ``ValueError``/``TypeError``; the types
below cover the failures callers are expected to handle.
"""
from typing import Optional


class FirestoreSnapshotError(Exception):
    """Base exception for all firestore_snapshot failures."""


class DocumentNotFoundError(FirestoreSnapshotError):
    """Raised when a document does not exist or cannot be decoded into its model.

    Both cases surface as the same error; a decoding failure is chained
    as ``__cause__``.
    """

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Document does not exist: {path}")


class FieldResolutionError(FirestoreSnapshotError):
    """Raised by a strict QueryBuilder when a field has no wire name."""


class InvalidPathError(FirestoreSnapshotError, ValueError):
    """Raised for malformed document or collection paths."""
