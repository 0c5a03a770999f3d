from typing import Any, Dict, List, NamedTuple, Optional, Union

from .enums import FirestoreOperators
from .pydantic_compat import get_field_alias, get_model_fields


class Condition(NamedTuple):
    """A ``where`` clause built from a field accessor, e.g. ``User.age >= 18``."""

    field: "FirestoreField"
    operator: FirestoreOperators
    value: Any


class FirestoreField:
    """
    Lightweight *descriptor* that allows class-level attribute access
    to build typed Firestore clauses.

    Examples
    --------
    >>> User.age >= 18
    Condition(field=User.age, operator=FirestoreOperators.GTE, value=18)

    When accessed on an **instance** the real value is returned,
    while a class-level access yields the descriptor itself so it can be
    handed to a :class:`QueryBuilder` or combined with comparison operators.
    The descriptor remembers the model it belongs to; it never resolves
    against an unrelated model, and subclasses that were not registered
    themselves do not see it, so pydantic keeps inheriting the parent's
    field definitions for them.
    """

    def __init__(self, attribute: str, field_name: Optional[str] = None, owner: Optional[type] = None):
        self.attribute = attribute
        self.field_name = field_name
        self.owner = owner

    # ------------------------------------------------------------------ #
    # Descriptor protocol                                                #
    # ------------------------------------------------------------------ #

    def __set_name__(self, owner, name):
        self.owner = owner
        self.attribute = name

    def __get__(self, instance, owner):
        """
        Instance access → return the actual value.
        Class access   → return *self* for later comparisons.
        """
        # Class-level access
        if instance is None:
            if self.owner is not None and owner is not self.owner:
                raise AttributeError(
                    f"{owner.__name__} has no accessor for {self.attribute!r}; "
                    f"register it with init_firestore_snapshot."
                )
            return self
        # Instance-level access
        return instance.__dict__.get(self.attribute)

    # ------------------------------------------------------------------ #
    # Convenience dunder methods                                         #
    # ------------------------------------------------------------------ #

    def __str__(self) -> str:          # noqa: DunderStr
        if self.field_name is None:
            return f"<unresolved {self!r}>"
        return self.field_name

    def __repr__(self) -> str:
        owner = self.owner.__name__ if self.owner is not None else "?"
        return f"{owner}.{self.attribute}"

    def __hash__(self) -> int:         # noqa: DunderHash
        return hash((self.owner, self.attribute))

    # ------------------------------------------------------------------ #
    # Comparison operators build Condition tuples                        #
    # ------------------------------------------------------------------ #

    def __eq__(self, other):           # type: ignore[override]
        return Condition(self, FirestoreOperators.EQ, other)

    def __ne__(self, other):           # type: ignore[override]
        return Condition(self, FirestoreOperators.NE, other)

    def __lt__(self, other):
        return Condition(self, FirestoreOperators.LT, other)

    def __le__(self, other):
        return Condition(self, FirestoreOperators.LTE, other)

    def __gt__(self, other):
        return Condition(self, FirestoreOperators.GT, other)

    def __ge__(self, other):
        return Condition(self, FirestoreOperators.GTE, other)

    # ------------------------------------------------------------------ #
    # Firestore-specific helpers                                         #
    # ------------------------------------------------------------------ #

    def in_(self, values: List[Any]) -> Condition:
        """Return an ``IN`` condition."""
        return Condition(self, FirestoreOperators.IN, values)

    def not_in_(self, values: List[Any]) -> Condition:
        """Return a ``NOT_IN`` condition."""
        return Condition(self, FirestoreOperators.NOT_IN, values)

    def array_contains(self, value: Any) -> Condition:
        """Return an ``ARRAY_CONTAINS`` condition."""
        return Condition(self, FirestoreOperators.ARRAY_CONTAINS, value)

    def array_contains_any(self, values: List[Any]) -> Condition:
        """Return an ``ARRAY_CONTAINS_ANY`` condition."""
        return Condition(self, FirestoreOperators.ARRAY_CONTAINS_ANY, values)


FieldAccessor = Union[FirestoreField, str]

# One static table per model class, built on first use.
_FIELD_NAME_TABLES: Dict[type, Dict[str, str]] = {}


def accessor_attribute(accessor: FieldAccessor) -> str:
    """Attribute name behind an accessor (a descriptor or a plain string)."""
    if isinstance(accessor, FirestoreField):
        return accessor.attribute
    return accessor


class FieldNameReferable:
    """
    Mixin for models usable with :class:`QueryBuilder`.

    Maps attribute names to the field names stored in Firestore. By default
    every model field is queryable under its alias (or its own name). A
    model can pin the table down explicitly::

        class Post(SnapshotData, FieldNameReferable):
            class Settings:
                name = "posts"
                field_names = {"title": "title", "published": "isPublished"}

    in which case attributes missing from the table do not resolve.
    """

    @classmethod
    def field_names(cls) -> Dict[str, str]:
        table = _FIELD_NAME_TABLES.get(cls)
        if table is None:
            declared = getattr(getattr(cls, "Settings", None), "field_names", None)
            if declared is not None:
                table = dict(declared)
            else:
                table = {name: get_field_alias(cls, name) for name in get_model_fields(cls)}
            _FIELD_NAME_TABLES[cls] = table
        return table

    @classmethod
    def field_name(cls, accessor: FieldAccessor) -> Optional[str]:
        """Wire name for ``accessor``, or None if it is not a field of this model."""
        if isinstance(accessor, FirestoreField):
            if accessor.owner is not None and not issubclass(cls, accessor.owner):
                return None
        elif not isinstance(accessor, str):
            return None
        return cls.field_names().get(accessor_attribute(accessor))

    @classmethod
    def initialize_fields(cls) -> None:
        """Install a :class:`FirestoreField` on the class for every model field."""
        names = cls.field_names()
        for attribute in get_model_fields(cls):
            setattr(cls, attribute, FirestoreField(attribute, names.get(attribute), owner=cls))
