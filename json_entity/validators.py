"""Attribute validators, including validation of nested entities."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from json_entity.entity import JsonEntity, is_empty, parse_entity_class
from json_entity.exceptions import (
    InvalidConfigError,
    NestedValidationError,
    TypeMismatchError,
    ValidateError,
)
from json_entity.interfaces import Validatable
from json_entity.model import Model
from json_entity.registry import resolve_entity_class

logger = logging.getLogger(__name__)


class Validator:
    """
    Base class for attribute validators.

    Subclasses implement parse_value(), which returns the (possibly
    converted) value or raises ValidateError. validate_attribute() stores
    the parsed value back on the model, or reports the error on the model.

    Example:
        class PositiveValidator(Validator):
            def parse_value(self, value):
                if value <= 0:
                    raise ValidateError("Must be positive")
                return value

    """

    skip_on_empty = True

    def __init__(self, *, message: str | None = None, skip_on_empty: bool | None = None) -> None:
        self.message = message
        if skip_on_empty is not None:
            self.skip_on_empty = skip_on_empty

    def parse_value(self, value: Any) -> Any:
        return value

    def validate_value(self, value: Any) -> str | None:
        """Validate a standalone value; returns the error message or None."""
        try:
            self.parse_value(value)
        except ValidateError as e:
            return self.message or str(e)
        return None

    def validate_attribute(self, model: Model, attribute: str) -> None:
        value = model.get_attribute(attribute)
        if self.skip_on_empty and is_empty(value):
            return
        try:
            value = self.parse_value(value)
        except ValidateError as e:
            model.add_error(attribute, self.message or str(e))
            return
        model.set_attribute(attribute, value)


class RequiredValidator(Validator):
    """Value must not be empty."""

    skip_on_empty = False

    def parse_value(self, value: Any) -> Any:
        if is_empty(value):
            raise ValidateError("Value is required")
        return value


class EntityValidator(Validator):
    """
    Validator of attributes holding nested entities.

    Checks that the value is an instance of the configured class (or a list
    of instances), building instances from raw JSON objects first. Values
    that validate themselves (models) are validated too, and their errors
    are reported as the error of this attribute.

    The class may be:
    - a class or registered class name: the attribute holds one object
    - a one-element list [class]: the attribute holds a list of objects
    - None: taken from the JsonEntity's attribute_entities() on each run

    Example:
        class Order(JsonEntity):
            customer: Customer = Field(entity=Customer)
            items: list[Item] = Field(entity=[Item], default_factory=list)

            def rules(self):
                return [(["customer", "items"], "entity")]

    """

    skip_on_empty = False

    def __init__(self, class_: Any = None, **options: Any) -> None:
        if "class" in options:
            class_ = options.pop("class")
        super().__init__(**options)
        self.class_ = class_

    def resolve_class(self, model: Model, attribute: str) -> tuple[type, bool]:
        """
        Resolve the target class of an attribute.

        Returns:
            (class, is_list)

        Raises:
            InvalidConfigError: If no class is configured and the model
                declares none for the attribute

        """
        spec = self.class_
        if spec is None and isinstance(model, JsonEntity):
            spec = model.attribute_entities().get(attribute)
            logger.debug("Entity class of %s.%s: %r", type(model).__name__, attribute, spec)

        if spec is None:
            raise InvalidConfigError(
                f"Entity class of {type(model).__name__}.{attribute} is not set "
                "and the model does not declare one"
            )

        ref, many = parse_entity_class(attribute, spec)
        if isinstance(model, JsonEntity):
            return model.resolve_entity_class(ref), many
        return resolve_entity_class(ref), many

    @staticmethod
    def coerce(value: Any, cls: type) -> Any:
        """
        Convert a value to a valid instance of cls.

        Raises:
            TypeMismatchError: If the value is not an instance of cls
            NestedValidationError: If the instance fails its own validation

        """
        if isinstance(value, Mapping):
            value = JsonEntity.create_child_entity(cls, value)

        if not isinstance(value, cls):
            raise TypeMismatchError(cls)

        if isinstance(value, Validatable) and not value.validate():
            raise NestedValidationError(value, dict(value.errors))

        return value

    def parse(self, value: Any, cls: type, many: bool) -> Any:
        if is_empty(value):
            return None

        if many:
            if not isinstance(value, (list, tuple)):
                raise ValidateError("Value must be a list")
            return [self.coerce(item, cls) for item in value]

        return self.coerce(value, cls)

    def parse_value(self, value: Any) -> Any:
        if self.class_ is None:
            raise InvalidConfigError("Entity class is not set")
        ref, many = parse_entity_class("value", self.class_)
        return self.parse(value, resolve_entity_class(ref), many)

    def validate_attribute(self, model: Model, attribute: str) -> None:
        cls, many = self.resolve_class(model, attribute)
        try:
            value = self.parse(model.get_attribute(attribute), cls, many)
        except ValidateError as e:
            model.add_error(attribute, self.message or str(e))
            return
        model.set_attribute(attribute, value)


BUILTIN_VALIDATORS: dict[str, type[Validator]] = {
    "required": RequiredValidator,
    "entity": EntityValidator,
}


def register_validator(name: str, validator: type[Validator]) -> None:
    """Register a validator class under a rule name."""
    BUILTIN_VALIDATORS[name] = validator


def create_validator(spec: Any, **options: Any) -> Validator:
    """
    Create a validator from a rule specification.

    Args:
        spec: A Validator instance, a Validator subclass, or a registered name
        **options: Constructor options for classes and names

    Raises:
        InvalidConfigError: If the specification is unknown

    """
    if isinstance(spec, Validator):
        if options:
            raise InvalidConfigError("Options cannot be applied to a validator instance")
        return spec
    if isinstance(spec, type) and issubclass(spec, Validator):
        return spec(**options)
    if isinstance(spec, str):
        validator = BUILTIN_VALIDATORS.get(spec)
        if validator is None:
            raise InvalidConfigError(f"Unknown validator: {spec}")
        return validator(**options)
    raise InvalidConfigError(f"Invalid validator: {spec!r}")
