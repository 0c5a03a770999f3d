import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, Optional, Type, TypeVar, Union

from google.cloud.firestore_v1.base_document import BaseDocumentReference, DocumentSnapshot

from .codec import decode, encode
from .enums import SnapshotTimestampKey
from .exceptions import DocumentNotFoundError
from .firestore_fields import FieldAccessor, FirestoreField, accessor_attribute
from .firestore_model import has_timestamps
from .paths import CollectionPath, DocumentPath
from .pydantic_compat import ValidationError, get_model_fields
from .references import Reference

if TYPE_CHECKING:
    from .firestore_client import FirestoreDB

D = TypeVar("D")

DataFactory = Callable[[BaseDocumentReference], D]

logger = logging.getLogger(__name__)


def _timestamp(payload: Dict[str, Any], key: SnapshotTimestampKey) -> Optional[datetime]:
    value = payload.get(key.value)
    return value if isinstance(value, datetime) else None


class Snapshot(Generic[D]):
    """
    A document's content together with where it lives and when it was
    last touched.

    ``data`` is the decoded model and may be mutated freely; ``reference``
    identifies the backing document and never changes. For models that
    mix in :class:`HasTimestamps`, the store-assigned ``create_time`` and
    ``update_time`` are captured once, when the snapshot is built from a
    fetched document, and are not refreshed by later writes.

    Snapshots perform no I/O; reads and writes go through :class:`FirestoreDB`.
    """

    def __init__(self, data: D, reference: BaseDocumentReference):
        self.data = data
        self._reference = reference
        self._snapshot: Optional[DocumentSnapshot] = None
        self._create_time: Optional[datetime] = None
        self._update_time: Optional[datetime] = None

    # --------------------------------------------------------------------------
    # Alternate constructors
    # --------------------------------------------------------------------------
    @classmethod
    def at(
        cls,
        path: Union[DocumentPath[D], CollectionPath[D]],
        data: Optional[D] = None,
        *,
        factory: Optional[DataFactory] = None,
        id: Optional[str] = None,
        db: Optional["FirestoreDB"] = None,
    ) -> "Snapshot[D]":
        """
        Bind new data to a location.

        ``path`` is either a document path, or a collection path plus an
        optional ``id`` (a client-generated id is used when omitted). Pass
        the data directly, or a ``factory`` that receives the resolved
        document reference and returns the data, for models that embed
        their own id or reference.
        """
        if (data is None) == (factory is None):
            raise ValueError("Provide exactly one of data or factory.")

        if isinstance(path, CollectionPath):
            reference = path.document_reference(id, db=db)
        elif isinstance(path, DocumentPath):
            if id is not None:
                raise ValueError("An id can only be given together with a CollectionPath.")
            reference = path.document_reference(db=db)
        else:
            raise TypeError(f"Expected a DocumentPath or CollectionPath, got {type(path).__name__}")

        if factory is not None:
            data = factory(reference)
        return cls(data, reference)

    @classmethod
    def from_document(cls, document: DocumentSnapshot, model: Type[D]) -> "Snapshot[D]":
        """
        Decode a fetched document.

        Raises :class:`DocumentNotFoundError` if the document does not exist
        or its payload does not decode into ``model``.
        """
        path = document.reference.path
        if not document.exists:
            raise DocumentNotFoundError(path)

        payload = document.to_dict() or {}
        try:
            data = decode(model, payload)
        except ValidationError as exc:
            logger.debug(f"Decode failed for {path} as {model.__name__}: {exc}")
            raise DocumentNotFoundError(path) from exc

        snapshot = cls(data, document.reference)
        snapshot._snapshot = document
        if has_timestamps(model):
            snapshot._create_time = _timestamp(payload, SnapshotTimestampKey.CREATE_TIME)
            snapshot._update_time = _timestamp(payload, SnapshotTimestampKey.UPDATE_TIME)
        return snapshot

    # --------------------------------------------------------------------------
    # Location
    # --------------------------------------------------------------------------
    @property
    def reference(self) -> BaseDocumentReference:
        return self._reference

    @property
    def path(self) -> DocumentPath[D]:
        return DocumentPath(self._reference.path, type(self.data))

    @property
    def id(self) -> str:
        return self._reference.id

    @property
    def snapshot(self) -> Optional[DocumentSnapshot]:
        """The raw document this snapshot was decoded from, if any."""
        return self._snapshot

    # --------------------------------------------------------------------------
    # Timestamps (HasTimestamps models only)
    # --------------------------------------------------------------------------
    def _require_timestamps(self, name: str) -> None:
        if not has_timestamps(self.data):
            raise AttributeError(f"{type(self.data).__name__} does not track timestamps; no {name!r}.")

    @property
    def create_time(self) -> Optional[datetime]:
        self._require_timestamps("create_time")
        return self._create_time

    @property
    def update_time(self) -> Optional[datetime]:
        self._require_timestamps("update_time")
        return self._update_time

    # --------------------------------------------------------------------------
    # Typed field access
    # --------------------------------------------------------------------------
    def _attribute(self, accessor: FieldAccessor) -> str:
        if isinstance(accessor, FirestoreField) and accessor.owner is not None:
            if not isinstance(self.data, accessor.owner):
                raise KeyError(accessor)
        attribute = accessor_attribute(accessor)
        if attribute not in get_model_fields(type(self.data)):
            raise KeyError(accessor)
        return attribute

    def __getitem__(self, accessor: FieldAccessor) -> Any:
        return getattr(self.data, self._attribute(accessor))

    def __setitem__(self, accessor: FieldAccessor, value: Any) -> None:
        setattr(self.data, self._attribute(accessor), value)

    def reference_of(self, accessor: FieldAccessor) -> Reference:
        """Read-only access to a field holding a :class:`Reference`."""
        value = self[accessor]
        if not isinstance(value, Reference):
            raise TypeError(f"Field {accessor!r} does not hold a Reference.")
        return value

    # --------------------------------------------------------------------------
    # Copies
    # --------------------------------------------------------------------------
    def replicated(
        self, path: Optional[DocumentPath[D]] = None, db: Optional["FirestoreDB"] = None
    ) -> "Snapshot[D]":
        """
        Detached copy of this snapshot, bound to ``path`` or to the same path.

        The data is deep-copied through an encode/decode round trip, so the
        copy shares no mutable state with the original. Cached timestamps
        are carried over as they are.
        """
        data = decode(type(self.data), encode(self.data))
        reference = self._reference if path is None else path.document_reference(db)
        replica = Snapshot(data, reference)
        if has_timestamps(data):
            replica._create_time = self._create_time
            replica._update_time = self._update_time
        return replica

    # --------------------------------------------------------------------------
    # Equality
    # --------------------------------------------------------------------------
    def __eq__(self, other):
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._reference.path == other._reference.path and self.data == other.data

    __hash__ = None

    def __repr__(self) -> str:
        return f"Snapshot({self._reference.path!r}, {self.data!r})"
