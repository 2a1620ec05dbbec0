"""Custom exceptions for json-entity."""

from __future__ import annotations

from typing import Any


class JsonEntityError(Exception):
    """Base exception for json-entity."""


class InvalidConfigError(JsonEntityError):
    """Entity or validator declarations are incomplete or malformed."""


class StructureError(JsonEntityError):
    """JSON data does not have the shape its attribute declares."""

    def __init__(self, message: str, attribute: str | None = None) -> None:
        super().__init__(message)
        self.attribute = attribute


class UnknownAttributeError(JsonEntityError):
    """A field or name does not match any declared attribute."""

    def __init__(self, attribute: str) -> None:
        super().__init__(f"Unknown attribute: {attribute}")
        self.attribute = attribute


class ValidateError(JsonEntityError):
    """Value failed validation; reported as the error of one attribute."""


class TypeMismatchError(ValidateError):
    """Value is not an instance of the required class."""

    def __init__(self, expected: type) -> None:
        super().__init__(f"Must be an instance of {expected.__name__}")
        self.expected = expected


class NestedValidationError(ValidateError):
    """Nested value failed its own validation."""

    def __init__(self, value: Any, errors: dict[str, list[str]]) -> None:
        details = "; ".join(
            f"{name}: {', '.join(messages)}" for name, messages in errors.items()
        )
        super().__init__(f"Invalid {type(value).__name__}: {details}")
        self.value = value
        self.errors = errors
