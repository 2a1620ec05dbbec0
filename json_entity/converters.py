"""Custom attribute converters."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from json_entity.entity import JsonEntity

# Signature of converter functions: (value, attribute, entity) -> converted value
ConverterFunc = Callable[[Any, str, "JsonEntity"], Any]


@dataclass(frozen=True, slots=True)
class Function:
    """Converter that calls a function with (value, attribute, entity)."""

    func: ConverterFunc

    def apply(self, value: Any, attribute: str, entity: JsonEntity) -> Any:
        return self.func(value, attribute, entity)


@dataclass(frozen=True, slots=True)
class Literal:
    """Converter that replaces the value with a fixed one."""

    value: Any

    def apply(self, value: Any, attribute: str, entity: JsonEntity) -> Any:
        return self.value


Converter = Function | Literal


def as_converter(spec: Any) -> Converter:
    """
    Normalize a converter map entry.

    Callables become Function converters, anything else is used verbatim
    as a Literal. Converter instances are returned unchanged.
    """
    if isinstance(spec, (Function, Literal)):
        return spec
    if callable(spec):
        return Function(spec)
    return Literal(spec)


# Ready-made converters, usable as Field(to_json=..., from_json=...)


def datetime_to_json(value: Any, attribute: str, entity: Any) -> Any:
    """Write a datetime or date as an ISO 8601 string."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def datetime_from_json(value: Any, attribute: str, entity: Any) -> datetime | None:
    """Read an ISO 8601 string as an aware datetime (UTC when no offset)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    s = str(value)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def decimal_to_json(value: Any, attribute: str, entity: Any) -> Any:
    """Write a Decimal as its exact string form."""
    if isinstance(value, Decimal):
        return str(value)
    return value


def decimal_from_json(value: Any, attribute: str, entity: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def uuid_to_json(value: Any, attribute: str, entity: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    return value


def uuid_from_json(value: Any, attribute: str, entity: Any) -> UUID | None:
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    return UUID(str(value))
