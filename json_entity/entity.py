"""Entities convertible to and from JSON data."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, ClassVar, Self

from json_entity.converters import as_converter
from json_entity.exceptions import InvalidConfigError, StructureError, UnknownAttributeError
from json_entity.inflector import camel_to_snake
from json_entity.interfaces import BulkAssignable, JsonSerializable
from json_entity.model import DERIVED, Model
from json_entity.pydantic_support import build_model, dump_model, is_pydantic_class, is_pydantic_model
from json_entity.registry import field_map_cache, resolve_entity_class

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool)


def is_empty(value: Any) -> bool:
    """
    Whether a value counts as empty.

    Only None, "" and empty containers are empty; 0, False and "0" are not.
    """
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def parse_entity_class(attribute: str, spec: Any) -> tuple[Any, bool]:
    """
    Split an attribute-entities declaration into (class reference, is_list).

    Args:
        attribute: The attribute the declaration belongs to
        spec: A class or class name, or a one-element list of either

    Raises:
        InvalidConfigError: If the declaration has any other shape

    """
    if isinstance(spec, (list, tuple)):
        if len(spec) == 1 and _is_class_ref(spec[0]):
            return spec[0], True
    elif _is_class_ref(spec):
        return spec, False
    raise InvalidConfigError(f"Unknown entity class of attribute {attribute}: {spec!r}")


def _is_class_ref(ref: Any) -> bool:
    return isinstance(ref, type) or (isinstance(ref, str) and ref != "")


class JsonEntity(Model):
    """
    Model that converts to and from nested JSON data.

    - maps attribute names to JSON field names (camelCase -> snake_case by default)
    - builds nested entities and lists of nested entities from JSON objects
    - applies custom per-attribute converters in both directions

    Example:
        class Item(JsonEntity):
            sku: str = Field()
            unitPrice: float = Field()

        class Order(JsonEntity):
            order_id: int = Field(field="id")
            items: list[Item] = Field(entity=[Item], default_factory=list)

        order = Order.from_json({"id": 7, "items": [{"sku": "A1", "unit_price": 9.5}]})
        order.items[0].unitPrice  # -> 9.5
        order.json  # -> {"id": 7, "items": [{"sku": "A1", "unit_price": 9.5}]}
    """

    # Default of set_json(skip_unknown=None)
    __skip_unknown__: ClassVar[bool] = True

    def __init__(self, json: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """
        Initialize with attribute values and/or JSON data.

        Args:
            json: JSON data applied after the attribute values
            **kwargs: Attribute values

        """
        super().__init__(**kwargs)
        if json is not None:
            self.set_json(json)

    @classmethod
    def from_json(cls, data: Mapping[str, Any], skip_unknown: bool | None = None) -> Self:
        """Create an entity populated from JSON data."""
        entity = cls()
        entity.set_json(data, skip_unknown)
        return entity

    def attribute_fields(self) -> dict[str, str | None]:
        """
        Map of attribute names to JSON field names.

        Only attributes whose field name differs from the attribute name are
        listed. A field name of None or "" excludes the attribute from JSON.

        The default map is derived once per class from Field(field=...) and
        the snake_case form of the attribute names. Override to add entries:

            def attribute_fields(self):
                return {**super().attribute_fields(), "my_name": "name"}

        """
        return dict(field_map_cache.get_or_compute(type(self), self._derive_attribute_fields))

    def _derive_attribute_fields(self) -> dict[str, str | None]:
        fields: dict[str, str | None] = {}
        for name, descriptor in self.__model_fields__.items():
            if descriptor.field is DERIVED:
                field = camel_to_snake(name)
                if field != name:
                    fields[name] = field
            else:
                fields[name] = descriptor.field
        return fields

    def attribute_entities(self) -> dict[str, Any]:
        """
        Classes of nested entities.

        Returns:
            Map of attribute name to one of:
            - a class (or registered class name): the attribute holds one entity
            - a one-element list [class]: the attribute holds a list of entities

        """
        return {
            name: descriptor.entity
            for name, descriptor in self.__model_fields__.items()
            if descriptor.entity is not None
        }

    def attributes_to_json(self) -> dict[str, Any]:
        """
        Custom converters of attribute values to JSON.

        Returns:
            Map of attribute name to a function(value, attribute, entity) or a
            literal JSON value used as is.

        """
        return {
            name: descriptor.to_json
            for name, descriptor in self.__model_fields__.items()
            if descriptor.to_json is not None
        }

    def attributes_from_json(self) -> dict[str, Any]:
        """
        Custom converters of JSON values to attribute values.

        Returns:
            Map of attribute name to a function(value, attribute, entity) or a
            literal attribute value used as is.

        """
        return {
            name: descriptor.from_json
            for name, descriptor in self.__model_fields__.items()
            if descriptor.from_json is not None
        }

    @classmethod
    def create_child_entity(cls, entity_class: type, data: Any) -> Any:
        """
        Create a nested object from JSON data.

        JsonEntity classes are populated with set_json, pydantic models are
        validated, other bulk-assignable models get set_attributes, and any
        other object gets its attributes set one by one.

        Args:
            entity_class: Class of the nested object
            data: JSON object data (an instance of entity_class is kept as is)

        Returns:
            The nested object

        """
        if isinstance(data, entity_class):
            return data

        data = _to_mapping(data)

        if is_pydantic_class(entity_class):
            return build_model(entity_class, data)

        entity = entity_class()
        if isinstance(entity, JsonEntity):
            entity.set_json(data)
        elif isinstance(entity, BulkAssignable):
            entity.set_attributes(data)
        else:
            for key, value in data.items():
                setattr(entity, key, value)
        return entity

    def resolve_entity_class(self, ref: Any) -> type:
        """Resolve a class reference; a string may name this entity's own class."""
        if isinstance(ref, str) and ref == type(self).__name__:
            return type(self)
        return resolve_entity_class(ref)

    def value_to_json(self, attribute: str, value: Any) -> Any:
        """
        Recursively convert an attribute value to JSON data.

        Args:
            attribute: Attribute name
            value: Attribute value (or an element of it)

        Returns:
            JSON data; None elements of lists and dicts are dropped

        """
        converter = self.attributes_to_json().get(attribute)
        if converter is not None:
            return as_converter(converter).apply(value, attribute, self)

        if is_empty(value) or isinstance(value, _SCALARS):
            return value

        if isinstance(value, JsonEntity):
            return value.get_json()

        if isinstance(value, JsonSerializable):
            return value.json_serialize()

        if is_pydantic_model(value):
            return dump_model(value)

        if isinstance(value, Mapping):
            result = {}
            for key, item in value.items():
                item = self.value_to_json(attribute, item)
                if item is not None:
                    result[key] = item
            return result

        if isinstance(value, (list, tuple, set, frozenset)):
            items = (self.value_to_json(attribute, item) for item in value)
            return [item for item in items if item is not None]

        return value

    def json_to_value(self, attribute: str, data: Any) -> Any:
        """
        Recursively convert JSON data to an attribute value.

        Args:
            attribute: Attribute name
            data: JSON data of the attribute field

        Returns:
            Attribute value

        Raises:
            InvalidConfigError: If the attribute-entities declaration is malformed
            StructureError: If a list of entities is declared but data is not a list

        """
        converter = self.attributes_from_json().get(attribute)
        if converter is not None:
            return as_converter(converter).apply(data, attribute, self)

        if is_empty(data) or isinstance(data, _SCALARS):
            return data

        spec = self.attribute_entities().get(attribute)
        if spec is None:
            return data

        ref, many = parse_entity_class(attribute, spec)
        entity_class = self.resolve_entity_class(ref)

        if many:
            if not isinstance(data, (list, tuple)):
                raise StructureError(
                    f"Attribute {attribute} must be a list, got {type(data).__name__}",
                    attribute,
                )
            return [self.create_child_entity(entity_class, item) for item in data]

        return self.create_child_entity(entity_class, data)

    def _attribute_for_field(self, field: str, fields: Mapping[str, str | None]) -> str | None:
        for attribute, mapped in fields.items():
            if mapped and mapped == field:
                return attribute
        if field in fields and not fields[field]:
            return None
        return field

    def set_json(self, data: Mapping[str, Any], skip_unknown: bool | None = None) -> None:
        """
        Populate attributes from JSON data.

        All values are converted before any is assigned, so a failing field
        leaves the entity untouched.

        Args:
            data: JSON object data
            skip_unknown: Ignore fields without an attribute (default: the
                class __skip_unknown__ setting); False raises instead

        Raises:
            UnknownAttributeError: If a field has no attribute and skip_unknown is False

        """
        if skip_unknown is None:
            skip_unknown = self.__skip_unknown__

        fields = self.attribute_fields()
        attributes = set(self.attributes())
        pending: dict[str, Any] = {}

        for field, value in data.items():
            attribute = self._attribute_for_field(field, fields)
            if attribute is None:
                logger.debug("Skipping excluded field %s of %s", field, type(self).__name__)
                continue

            if attribute not in attributes:
                if skip_unknown:
                    logger.debug("Skipping unknown field %s of %s", field, type(self).__name__)
                    continue
                raise UnknownAttributeError(attribute)

            pending[attribute] = self.json_to_value(attribute, value)

        if pending:
            self.assign_attributes(pending)

    def get_json(self) -> dict[str, Any]:
        """JSON data of the entity; empty values are omitted."""
        fields = self.attribute_fields()
        result: dict[str, Any] = {}

        for attribute, value in self.get_attributes().items():
            if attribute in fields:
                field = fields[attribute]
                if not field:
                    continue
            else:
                field = attribute

            data = self.value_to_json(attribute, value)
            if not is_empty(data):
                result[field] = data

        return result

    @property
    def json(self) -> dict[str, Any]:
        return self.get_json()

    @json.setter
    def json(self, data: Mapping[str, Any]) -> None:
        self.set_json(data)

    def json_serialize(self) -> dict[str, Any]:
        return self.get_json()


def _to_mapping(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    if isinstance(data, JsonEntity):
        return data.get_json()
    if is_pydantic_model(data):
        return dump_model(data)
    if hasattr(data, "__dict__"):
        return dict(vars(data))
    raise StructureError(f"Expected a JSON object, got {type(data).__name__}")
