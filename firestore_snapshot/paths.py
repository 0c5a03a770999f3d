"""
Typed locations in Firestore.

A :class:`DocumentPath` names one document and a :class:`CollectionPath`
names one collection, each tied to the model its documents decode into.
Both are plain values: building one never touches the store, and they are
turned into client references only on demand, against either an explicit
:class:`FirestoreDB` or the one registered on the model.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, List, Optional, Type, TypeVar

from .exceptions import InvalidPathError

if TYPE_CHECKING:
    from .firestore_client import FirestoreDB

D = TypeVar("D")
E = TypeVar("E")


def _segments(path: str) -> List[str]:
    stripped = path.strip("/")
    segments = stripped.split("/")
    if not stripped or any(not segment for segment in segments):
        raise InvalidPathError(f"Invalid Firestore path: {path!r}")
    return segments


def _resolve_db(model: type, db: Optional["FirestoreDB"]) -> "FirestoreDB":
    if db is not None:
        return db
    get_db = getattr(model, "get_db", None)
    if get_db is None:
        raise RuntimeError("Database must be initialized before using the model.")
    return get_db()


@dataclass(frozen=True)
class DocumentPath(Generic[D]):
    path: str
    model: Type[D]

    def __post_init__(self):
        segments = _segments(self.path)
        if len(segments) % 2 != 0:
            raise InvalidPathError(f"Not a document path: {self.path!r}")
        object.__setattr__(self, "path", "/".join(segments))

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> "CollectionPath[D]":
        return CollectionPath(self.path.rsplit("/", 1)[0], self.model)

    def collection(self, name: str, model: Type[E]) -> "CollectionPath[E]":
        """Subcollection ``name`` under this document."""
        return CollectionPath(f"{self.path}/{name}", model)

    def document_reference(self, db: Optional["FirestoreDB"] = None):
        return _resolve_db(self.model, db).client.document(self.path)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class CollectionPath(Generic[D]):
    path: str
    model: Type[D]

    def __post_init__(self):
        segments = _segments(self.path)
        if len(segments) % 2 != 1:
            raise InvalidPathError(f"Not a collection path: {self.path!r}")
        object.__setattr__(self, "path", "/".join(segments))

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def document(self, id: str) -> DocumentPath[D]:
        return DocumentPath(f"{self.path}/{id}", self.model)

    def collection_reference(self, db: Optional["FirestoreDB"] = None):
        return _resolve_db(self.model, db).client.collection(self.path)

    def document_reference(self, id: Optional[str] = None, db: Optional["FirestoreDB"] = None):
        """
        Reference to document ``id`` in this collection, or to a new document
        with a client-generated id when ``id`` is omitted.
        """
        if id is not None:
            return self.document(id).document_reference(db)
        return self.collection_reference(db).document()

    def __str__(self) -> str:
        return self.path
