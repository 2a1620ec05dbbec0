"""Model definitions with attribute descriptors."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from json_entity.exceptions import InvalidConfigError, UnknownAttributeError

if TYPE_CHECKING:
    from json_entity.validators import Validator

logger = logging.getLogger(__name__)


class _Derived:
    """Marker for a JSON field name derived from the attribute name."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "DERIVED"


DERIVED: Any = _Derived()

# Instance attributes Model keeps besides attribute values
_INSTANCE_STATE = frozenset({"_errors"})


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """
    Descriptor for a model attribute.

    Attributes:
        default: Default value if no value is given
        default_factory: Factory for mutable default values
        field: JSON field name; None or "" excludes the attribute from JSON
        entity: Nested entity class, class name, or one-element list of either
        to_json: Custom converter (callable or literal) used when writing JSON
        from_json: Custom converter (callable or literal) used when reading JSON
        safe: Whether the attribute accepts untrusted bulk assignment

    """

    default: Any = None
    default_factory: Callable[[], Any] | None = None
    field: str | None = DERIVED
    entity: Any = None
    to_json: Any = None
    from_json: Any = None
    safe: bool = True

    def initial_value(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


def Field(
    default: Any = None,
    *,
    default_factory: Callable[[], Any] | None = None,
    field: str | None = DERIVED,
    entity: Any = None,
    to_json: Any = None,
    from_json: Any = None,
    safe: bool = True,
) -> Any:
    """
    Declare a model attribute.

    Args:
        default: Default value if the attribute is not given
        default_factory: Factory function for mutable defaults
        field: JSON field name (None or "" to exclude from JSON)
        entity: Nested entity class (or [Class] for a list of entities)
        to_json: Custom converter for writing JSON
        from_json: Custom converter for reading JSON
        safe: False to reject the attribute in untrusted bulk assignment

    Attribute names must not clash with model members (errors, json,
    validate, attributes, ...). Rename the attribute and keep the JSON name:

        status_errors: list[str] = Field(field="errors")

    Returns:
        A FieldDescriptor (used at class definition time)

    Example:
        class Order(JsonEntity):
            order_id: int = Field(field="id")
            items: list[Item] = Field(entity=[Item], default_factory=list)

    """
    return FieldDescriptor(
        default=default,
        default_factory=default_factory,
        field=field,
        entity=entity,
        to_json=to_json,
        from_json=from_json,
        safe=safe,
    )


class ModelMeta(type):
    """
    Metaclass for Model that collects attribute declarations.

    Base class attributes come first; a subclass redeclaring an attribute
    replaces the inherited descriptor but keeps its position.
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ) -> ModelMeta:
        fields: dict[str, FieldDescriptor] = {}
        for base in reversed(bases):
            fields.update(getattr(base, "__model_fields__", {}))

        for attr_name, value in list(namespace.items()):
            if isinstance(value, FieldDescriptor):
                if attr_name in _INSTANCE_STATE or any(
                    attr_name in vars(klass) for base in bases for klass in base.__mro__
                ):
                    raise InvalidConfigError(
                        f"Attribute {name}.{attr_name} clashes with a model member"
                    )
                fields[attr_name] = value
                # Instances hold the values; the class keeps only descriptors
                del namespace[attr_name]

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)
        cls.__model_fields__ = fields  # type: ignore[attr-defined]
        return cls


class Model(metaclass=ModelMeta):
    """
    Base class for models with declared attributes and validation rules.

        class Person(Model):
            name: str = Field()
            role: str = Field("user", safe=False)

            def rules(self):
                return [(["name"], "required")]

        person = Person(name="Alice")
        person.validate()  # -> True
    """

    __model_fields__: ClassVar[dict[str, FieldDescriptor]]

    def __init__(self, **kwargs: Any) -> None:
        for name, descriptor in self.__model_fields__.items():
            object.__setattr__(self, name, descriptor.initial_value())
        self._errors: dict[str, list[str]] = {}
        if kwargs:
            self.assign_attributes(kwargs)

    @classmethod
    def attributes(cls) -> list[str]:
        """Declared attribute names in declaration order."""
        return list(cls.__model_fields__)

    def safe_attributes(self) -> list[str]:
        """Attribute names accepted by untrusted bulk assignment."""
        return [name for name, d in self.__model_fields__.items() if d.safe]

    def get_attribute(self, name: str) -> Any:
        if name not in self.__model_fields__:
            raise UnknownAttributeError(name)
        return getattr(self, name)

    def set_attribute(self, name: str, value: Any) -> None:
        if name not in self.__model_fields__:
            raise UnknownAttributeError(name)
        setattr(self, name, value)

    def get_attributes(self, names: Iterable[str] | None = None) -> dict[str, Any]:
        """Attribute values keyed by name, in declaration order."""
        if names is None:
            names = self.attributes()
        return {name: self.get_attribute(name) for name in names}

    def set_attributes(self, values: Mapping[str, Any]) -> None:
        """
        Assign values from untrusted input.

        Only safe attributes are assigned; everything else is ignored.
        """
        safe = set(self.safe_attributes())
        for name, value in values.items():
            if name in safe:
                setattr(self, name, value)
            else:
                logger.debug("Ignoring unsafe attribute %s.%s", type(self).__name__, name)

    def assign_attributes(self, values: Mapping[str, Any]) -> None:
        """
        Assign values from trusted input, bypassing the safe filter.

        Raises:
            UnknownAttributeError: If a name is not a declared attribute.

        """
        for name in values:
            if name not in self.__model_fields__:
                raise UnknownAttributeError(name)
        for name, value in values.items():
            setattr(self, name, value)

    def rules(self) -> list[tuple[Any, ...]]:
        """
        Validation rules.

        Each rule is (attribute names, validator[, options]), where validator is
        a Validator instance, a Validator subclass, or a registered name.
        """
        return []

    def _active_validators(self) -> list[tuple[list[str], Validator]]:
        from json_entity.validators import create_validator

        active = []
        for rule in self.rules():
            names, spec, *rest = rule
            if isinstance(names, str):
                names = [names]
            options = rest[0] if rest else {}
            active.append((list(names), create_validator(spec, **options)))
        return active

    def validate(
        self,
        attribute_names: Iterable[str] | None = None,
        clear_errors: bool = True,
    ) -> bool:
        """
        Run all validation rules.

        Args:
            attribute_names: Only validate these attributes (default: all)
            clear_errors: Drop errors of a previous run first

        Returns:
            True if no attribute has errors

        """
        if clear_errors:
            self.clear_errors()
        only = set(attribute_names) if attribute_names is not None else None

        for names, validator in self._active_validators():
            for name in names:
                if only is None or name in only:
                    validator.validate_attribute(self, name)

        return not self.has_errors()

    @property
    def errors(self) -> dict[str, list[str]]:
        return self._errors

    def add_error(self, attribute: str, message: str) -> None:
        self._errors.setdefault(attribute, []).append(message)

    def get_errors(self, attribute: str) -> list[str]:
        return list(self._errors.get(attribute, []))

    def has_errors(self, attribute: str | None = None) -> bool:
        if attribute is None:
            return bool(self._errors)
        return attribute in self._errors

    def first_errors(self) -> dict[str, str]:
        return {name: messages[0] for name, messages in self._errors.items() if messages}

    def clear_errors(self, attribute: str | None = None) -> None:
        if attribute is None:
            self._errors.clear()
        else:
            self._errors.pop(attribute, None)

    def __repr__(self) -> str:
        cls_name = self.__class__.__name__
        fields = ", ".join(
            f"{name}={getattr(self, name, None)!r}" for name in self.__model_fields__
        )
        return f"{cls_name}({fields})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.get_attributes() == other.get_attributes()

    __hash__ = None  # type: ignore[assignment]
