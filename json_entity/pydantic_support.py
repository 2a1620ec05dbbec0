"""
Pydantic model support for json-entity.

Pydantic models can be used as nested values of entity attributes:

    from pydantic import BaseModel

    class Address(BaseModel):
        city: str
        zip_code: str | None = None

    class Customer(JsonEntity):
        address: Address | None = Field(entity=Address)

    customer = Customer.from_json({"address": {"city": "Oslo"}})
    customer.address  # -> Address(city='Oslo', zip_code=None)
    customer.json  # -> {"address": {"city": "Oslo"}}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from json_entity.exceptions import NestedValidationError


def is_pydantic_model(value: Any) -> bool:
    """Whether value is a pydantic model instance."""
    return isinstance(value, BaseModel)


def is_pydantic_class(cls: Any) -> bool:
    """Whether cls is a pydantic model class."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def dump_model(value: BaseModel) -> dict[str, Any]:
    """JSON-compatible data of a model, by alias, without None values."""
    return value.model_dump(mode="json", by_alias=True, exclude_none=True)


def build_model(cls: type[BaseModel], data: Mapping[str, Any]) -> BaseModel:
    """
    Construct and validate a pydantic model from JSON data.

    Raises:
        NestedValidationError: If pydantic rejects the data.

    """
    try:
        return cls.model_validate(dict(data))
    except PydanticValidationError as e:
        raise NestedValidationError(cls.model_construct(), errors_by_field(e)) from e


def errors_by_field(error: PydanticValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by dotted field location."""
    errors: dict[str, list[str]] = {}
    for item in error.errors():
        loc = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(loc, []).append(item["msg"])
    return errors
