import logging
from typing import Any, Dict, Type

import pydantic
from packaging.version import parse
from pydantic.version import VERSION

logger = logging.getLogger(__name__)

version_parsed = parse(str(VERSION))

if version_parsed.major >= 2:
    PydanticVersion = 2
else:
    PydanticVersion = 1

PYDANTIC_V2_11_PLUS = (version_parsed.major, version_parsed.minor) >= (2, 11)

logger.debug(f"Using Pydantic {VERSION} (major version {PydanticVersion}).")


BaseModel: type = pydantic.BaseModel
Field: type = pydantic.Field
ValidationError: type = pydantic.ValidationError
# Only available on V2
ConfigDict = getattr(pydantic, "ConfigDict", None)


# Pydantic V1: __fields__; Pydantic V2: model_fields
def get_model_fields(cls: type) -> dict:
    if PydanticVersion == 1:
        return getattr(cls, "__fields__", {})
    else:
        # pydantic.v1.BaseModel en V2 aún define __fields__ para compat,
        # pero lo ideal es usar model_fields en V2. Así cubrimos ambos casos:
        return getattr(cls, "model_fields", {})  # type: ignore[attr-defined]


def get_field_alias(cls: type, field_name: str) -> str:
    """Return the name a model field is stored under (its alias, if any)."""
    field_info = get_model_fields(cls)[field_name]
    # field_info.alias funciona en V1 y V2 (en V1 vale field_name si no hay alias)
    return field_info.alias or field_name  # type: ignore[attr-defined]


def get_model_config() -> Dict[str, Any]:
    """Config keys that let a V2 model be populated by field name and by alias."""
    if PYDANTIC_V2_11_PLUS:
        return {"validate_by_name": True, "validate_by_alias": True}
    return {"populate_by_name": True}


def model_dump_compat(instance: Any, **kwargs) -> Dict[str, Any]:
    """``model_dump()`` on V2, ``dict()`` on V1."""
    if PydanticVersion == 1:
        return instance.dict(**kwargs)
    return instance.model_dump(**kwargs)


def model_validate_compat(cls: Type[Any], data: Dict[str, Any]) -> Any:
    """``model_validate()`` on V2, ``parse_obj()`` on V1."""
    if PydanticVersion == 1:
        return cls.parse_obj(data)
    return cls.model_validate(data)


__all__ = [
    "BaseModel",
    "Field",
    "ValidationError",
    "ConfigDict",
    "get_model_fields",
    "get_field_alias",
    "get_model_config",
    "model_dump_compat",
    "model_validate_compat",
    "PydanticVersion",
    "PYDANTIC_V2_11_PLUS",
]
