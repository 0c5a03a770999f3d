"""Translation between model instances and Firestore field maps."""

from typing import Any, Dict, Type, TypeVar

from .pydantic_compat import model_dump_compat, model_validate_compat
from .references import Reference

D = TypeVar("D")


def _to_store_value(value: Any) -> Any:
    if isinstance(value, Reference):
        return value.reference
    if isinstance(value, dict):
        return {key: _to_store_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_store_value(item) for item in value]
    return value


def encode(data: Any) -> Dict[str, Any]:
    """Field map for ``data``, keyed by alias, ready to be written to Firestore."""
    return _to_store_value(model_dump_compat(data, by_alias=True))


def decode(model: Type[D], payload: Dict[str, Any]) -> D:
    """Build a ``model`` instance from a Firestore field map.

    Raises pydantic's ``ValidationError`` if the payload does not fit.
    Unknown keys, such as the reserved timestamp fields, are ignored.
    """
    return model_validate_compat(model, payload)
