"""
Bidirectional mapping between JSON data and typed entity models.

Usage:
    from json_entity import JsonEntity, Field

    class Item(JsonEntity):
        sku: str = Field()
        unitPrice: float = Field()

    class Order(JsonEntity):
        order_id: int = Field(field="id")
        items: list[Item] = Field(entity=[Item], default_factory=list)

        def rules(self):
            return [(["order_id"], "required"), (["items"], "entity")]

    order = Order.from_json({"id": 7, "items": [{"sku": "A1", "unit_price": 9.5}]})
    order.validate()  # -> True
    order.json  # -> {"id": 7, "items": [{"sku": "A1", "unit_price": 9.5}]}
"""

__version__ = "0.1.0"

from json_entity.converters import Converter, Function, Literal, as_converter
from json_entity.entity import JsonEntity, is_empty, parse_entity_class
from json_entity.exceptions import (
    InvalidConfigError,
    JsonEntityError,
    NestedValidationError,
    StructureError,
    TypeMismatchError,
    UnknownAttributeError,
    ValidateError,
)
from json_entity.inflector import camel_to_snake
from json_entity.interfaces import BulkAssignable, JsonSerializable, Validatable
from json_entity.model import DERIVED, Field, FieldDescriptor, Model
from json_entity.registry import (
    EntityRegistry,
    FieldMapCache,
    entity_registry,
    field_map_cache,
    register_entity,
)
from json_entity.validators import (
    BUILTIN_VALIDATORS,
    EntityValidator,
    RequiredValidator,
    Validator,
    create_validator,
    register_validator,
)

__all__ = [
    # Models
    "Model",
    "Field",
    "FieldDescriptor",
    "DERIVED",
    "JsonEntity",
    "is_empty",
    "parse_entity_class",
    "camel_to_snake",
    # Capabilities
    "JsonSerializable",
    "Validatable",
    "BulkAssignable",
    # Converters
    "Converter",
    "Function",
    "Literal",
    "as_converter",
    # Validators
    "Validator",
    "RequiredValidator",
    "EntityValidator",
    "BUILTIN_VALIDATORS",
    "create_validator",
    "register_validator",
    # Registry
    "FieldMapCache",
    "field_map_cache",
    "EntityRegistry",
    "entity_registry",
    "register_entity",
    # Exceptions
    "JsonEntityError",
    "InvalidConfigError",
    "StructureError",
    "UnknownAttributeError",
    "ValidateError",
    "TypeMismatchError",
    "NestedValidationError",
    # Version
    "__version__",
]
