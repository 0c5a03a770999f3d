import logging
from typing import Any, Callable, Generic, Optional, Type, TypeVar, Union

from google.cloud.firestore_v1.base_document import DocumentSnapshot
from google.cloud.firestore_v1.base_query import FieldFilter

from .enums import FirestoreOperators, OrderByDirection
from .exceptions import FieldResolutionError
from .firestore_fields import Condition, FieldAccessor, FieldNameReferable
from .paths import CollectionPath
from .snapshot import Snapshot

D = TypeVar("D", bound=FieldNameReferable)

Cursor = Union[DocumentSnapshot, Snapshot]

logger = logging.getLogger(__name__)


class QueryBuilder(Generic[D]):
    """
    Typed builder over a Firestore query.

    Every filter and ordering clause names its field through the model, so
    only fields the model declares end up in the query::

        query = (
            QueryBuilder.from_path(User.collection_path())
            .where(User.age >= 18)
            .order(User.name)
            .limit(20)
            .generate()
        )

    Each call returns the builder itself and narrows the wrapped query.
    A clause whose field has no wire name is skipped with a warning, or
    raises :class:`FieldResolutionError` when the builder is ``strict``.
    """

    def __init__(self, model: Type[D], query: Any, *, strict: bool = False):
        if not (isinstance(model, type) and issubclass(model, FieldNameReferable)):
            raise TypeError(f"{model!r} must mix in FieldNameReferable to be queried.")
        self.model = model
        self.query = query
        self.strict = strict

    @classmethod
    def from_path(cls, path: CollectionPath[D], db=None, *, strict: bool = False) -> "QueryBuilder[D]":
        """Start from every document of the collection at ``path``."""
        return cls(path.model, path.collection_reference(db), strict=strict)

    def generate(self) -> Any:
        return self.query

    # --------------------------------------------------------------------------
    # Filters and ordering
    # --------------------------------------------------------------------------
    def where(
        self,
        field: Union[Condition, FieldAccessor],
        operator: Optional[Union[FirestoreOperators, str]] = None,
        value: Any = None,
    ) -> "QueryBuilder[D]":
        """
        Add a filter, given as ``where(User.age, ">=", 18)`` or ``where(User.age >= 18)``.
        """
        if isinstance(field, Condition):
            if operator is not None or value is not None:
                raise ValueError("Pass either a Condition or a field with an operator and value, not both.")
            field, operator, value = field
        if operator is None:
            raise ValueError("where() needs an operator or a Condition.")
        op = FirestoreOperators(operator)

        self._update_query(field, lambda query, name: query.where(filter=FieldFilter(name, op.value, value)))
        return self

    def order(self, field: FieldAccessor, descending: bool = False) -> "QueryBuilder[D]":
        direction = OrderByDirection.DESCENDING if descending else OrderByDirection.ASCENDING
        self._update_query(field, lambda query, name: query.order_by(name, direction=str(direction)))
        return self

    # --------------------------------------------------------------------------
    # Pagination
    # --------------------------------------------------------------------------
    def limit(self, count: int) -> "QueryBuilder[D]":
        self.query = self.query.limit(count)
        return self

    def offset(self, count: int) -> "QueryBuilder[D]":
        self.query = self.query.offset(count)
        return self

    def start_at(self, document: Cursor) -> "QueryBuilder[D]":
        self.query = self.query.start_at(self._cursor(document))
        return self

    def start_after(self, document: Cursor) -> "QueryBuilder[D]":
        self.query = self.query.start_after(self._cursor(document))
        return self

    def end_at(self, document: Cursor) -> "QueryBuilder[D]":
        self.query = self.query.end_at(self._cursor(document))
        return self

    def end_before(self, document: Cursor) -> "QueryBuilder[D]":
        self.query = self.query.end_before(self._cursor(document))
        return self

    # --------------------------------------------------------------------------
    # Internal helpers
    # --------------------------------------------------------------------------
    @staticmethod
    def _cursor(document: Cursor) -> DocumentSnapshot:
        if isinstance(document, Snapshot):
            if document.snapshot is None:
                raise ValueError(f"{document!r} was not fetched from the store and cannot be used as a cursor.")
            return document.snapshot
        return document

    def _update_query(self, field: FieldAccessor, builder: Callable[[Any, str], Any]) -> None:
        field_name = self.model.field_name(field)
        if field_name is None:
            message = f"Field name for {field!r} is not found on {self.model.__name__}."
            if self.strict:
                raise FieldResolutionError(message)
            logger.warning(f"{message} Skipping the clause.")
            return
        self.query = builder(self.query, field_name)
