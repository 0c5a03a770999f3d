from typing import TYPE_CHECKING, Any, Generic, Optional, Type, TypeVar, get_args

from google.cloud.firestore_v1.base_document import BaseDocumentReference

from .paths import DocumentPath

if TYPE_CHECKING:
    from .firestore_client import FirestoreDB
    from .snapshot import Snapshot

D = TypeVar("D")


class Reference(Generic[D]):
    """
    A field value that points at another typed document.

    Declared on a model as ``author: Reference[Author]``. It is stored in
    Firestore as a native document reference and keeps the loaded target,
    if any, in :attr:`value`::

        author = await post.data.author.load()
        print(author.data.name)
    """

    def __init__(self, reference: BaseDocumentReference, model: Optional[Type[D]] = None):
        self.reference = reference
        self.model = model
        self.value: Optional["Snapshot[D]"] = None

    @classmethod
    def to(cls, path: DocumentPath[D], db: Optional["FirestoreDB"] = None) -> "Reference[D]":
        return cls(path.document_reference(db), path.model)

    @property
    def path(self) -> DocumentPath[D]:
        if self.model is None:
            raise TypeError(f"Target model of reference {self.reference.path!r} is unknown.")
        return DocumentPath(self.reference.path, self.model)

    @property
    def is_loaded(self) -> bool:
        return self.value is not None

    async def load(self, db: Optional["FirestoreDB"] = None) -> "Snapshot[D]":
        """Fetch the target document and cache it on :attr:`value`."""
        path = self.path
        if db is None:
            db = path.model.get_db()
        self.value = await db.get(path)
        return self.value

    # ------------------------------------------------------------------ #
    # Pydantic integration                                               #
    # ------------------------------------------------------------------ #

    @classmethod
    def validate(cls, value: Any, model: Optional[type] = None) -> "Reference":
        if isinstance(value, Reference):
            return cls(value.reference, model or value.model)
        if isinstance(value, BaseDocumentReference):
            return cls(value, model)
        raise ValueError(f"Expected a document reference, got {type(value).__name__}")

    # Pydantic V1
    @classmethod
    def __get_validators__(cls):
        yield cls._validate_field

    @classmethod
    def _validate_field(cls, value, field):
        model = field.sub_fields[0].type_ if field.sub_fields else None
        return cls.validate(value, model)

    # Pydantic V2
    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        from pydantic_core import core_schema

        args = get_args(source_type)
        model = args[0] if args else None
        return core_schema.no_info_plain_validator_function(lambda value: cls.validate(value, model))

    # ------------------------------------------------------------------ #

    def __eq__(self, other):
        if not isinstance(other, Reference):
            return NotImplemented
        return self.reference.path == other.reference.path

    def __hash__(self) -> int:
        return hash(self.reference.path)

    def __repr__(self) -> str:
        return f"Reference({self.reference.path!r})"
