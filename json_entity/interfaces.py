"""Capability markers used to dispatch conversion and validation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class JsonSerializable(Protocol):
    """Object that produces its own JSON-compatible data."""

    def json_serialize(self) -> Any: ...


@runtime_checkable
class Validatable(Protocol):
    """Object that validates itself and collects errors per attribute."""

    @property
    def errors(self) -> dict[str, list[str]]: ...

    def validate(self) -> bool: ...


@runtime_checkable
class BulkAssignable(Protocol):
    """Object that accepts untrusted bulk assignment of its attributes."""

    def set_attributes(self, values: Mapping[str, Any]) -> None: ...
