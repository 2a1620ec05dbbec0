"""Tests for the model base class."""

import pytest

from json_entity import (
    BulkAssignable,
    Field,
    FieldDescriptor,
    InvalidConfigError,
    JsonEntity,
    JsonSerializable,
    Model,
    UnknownAttributeError,
    Validatable,
)
from json_entity.model import DERIVED


class Person(Model):
    name: str = Field()
    email: str = Field()
    role: str = Field("user", safe=False)

    def rules(self):
        return [(["name", "email"], "required")]


class TestFieldDescriptor:
    """Tests for Field declarations."""

    def test_defaults(self):
        """Test Field() default options."""
        descriptor = Field()
        assert isinstance(descriptor, FieldDescriptor)
        assert descriptor.default is None
        assert descriptor.field is DERIVED
        assert descriptor.entity is None
        assert descriptor.safe is True

    def test_descriptors_are_removed_from_class(self):
        """Test descriptors are collected instead of kept as class attributes."""
        assert "name" not in vars(Person)
        assert isinstance(Person.__model_fields__["name"], FieldDescriptor)


class TestModel:
    """Tests for Model."""

    def test_attributes_in_declaration_order(self):
        """Test attributes() keeps declaration order."""
        assert Person.attributes() == ["name", "email", "role"]

    def test_inherited_attributes_come_first(self):
        """Test base class attributes precede subclass attributes."""
        class Employee(Person):
            department: str = Field()
            role: str = Field("staff", safe=False)

        assert Employee.attributes() == ["name", "email", "role", "department"]
        assert Employee().role == "staff"

    def test_defaults(self):
        """Test defaults and default factories."""
        class Tagged(Model):
            tags: list = Field(default_factory=list)

        first = Tagged()
        second = Tagged()
        first.tags.append("a")
        assert second.tags == []
        assert Person().role == "user"

    def test_constructor_is_trusted(self):
        """Test constructor keywords may set unsafe attributes."""
        assert Person(role="admin").role == "admin"

    def test_constructor_rejects_unknown(self):
        """Test constructor keywords must be declared attributes."""
        with pytest.raises(UnknownAttributeError, match="nickname"):
            Person(nickname="al")

    def test_get_and_set_attribute(self):
        """Test single attribute access."""
        person = Person()
        person.set_attribute("name", "Alice")
        assert person.get_attribute("name") == "Alice"

    def test_unknown_attribute_access(self):
        """Test unknown names raise UnknownAttributeError."""
        person = Person()
        with pytest.raises(UnknownAttributeError):
            person.get_attribute("nickname")
        with pytest.raises(UnknownAttributeError):
            person.set_attribute("nickname", "al")

    def test_get_attributes(self):
        """Test bulk read, optionally limited to some names."""
        person = Person(name="Alice", email="a@example.com")
        assert person.get_attributes() == {
            "name": "Alice",
            "email": "a@example.com",
            "role": "user",
        }
        assert person.get_attributes(["email"]) == {"email": "a@example.com"}

    def test_set_attributes_filters_unsafe(self):
        """Test untrusted bulk assignment ignores unsafe and unknown names."""
        person = Person()
        person.set_attributes({"name": "Alice", "role": "admin", "nickname": "al"})
        assert person.name == "Alice"
        assert person.role == "user"

    def test_assign_attributes_is_trusted(self):
        """Test trusted bulk assignment sets unsafe attributes."""
        person = Person()
        person.assign_attributes({"role": "admin"})
        assert person.role == "admin"

    def test_assign_attributes_is_all_or_nothing(self):
        """Test trusted bulk assignment checks every name first."""
        person = Person()
        with pytest.raises(UnknownAttributeError):
            person.assign_attributes({"name": "Alice", "nickname": "al"})
        assert person.name is None

    def test_validate(self):
        """Test rules run and errors are collected per attribute."""
        person = Person(name="Alice")
        assert person.validate() is False
        assert person.errors == {"email": ["Value is required"]}
        assert person.has_errors("email")
        assert not person.has_errors("name")
        assert person.first_errors() == {"email": "Value is required"}

    def test_validate_subset(self):
        """Test validation limited to some attributes."""
        person = Person(name="Alice")
        assert person.validate(["name"]) is True

    def test_validate_clears_previous_errors(self):
        """Test a new run starts without old errors."""
        person = Person(name="Alice")
        person.validate()
        person.email = "a@example.com"
        assert person.validate() is True
        assert person.errors == {}

    def test_validate_keeps_errors_on_request(self):
        """Test clear_errors=False accumulates errors."""
        person = Person()
        person.add_error("name", "Taken")
        person.validate(["name"], clear_errors=False)
        assert person.get_errors("name") == ["Taken", "Value is required"]

    def test_clear_errors(self):
        """Test clearing errors of one or all attributes."""
        person = Person()
        person.validate()
        person.clear_errors("name")
        assert list(person.errors) == ["email"]
        person.clear_errors()
        assert not person.has_errors()

    def test_repr(self):
        """Test model repr lists attribute values."""
        assert repr(Person(name="Alice")) == "Person(name='Alice', email=None, role='user')"

    def test_equality(self):
        """Test models compare by class and attribute values."""
        assert Person(name="Alice") == Person(name="Alice")
        assert Person(name="Alice") != Person(name="Bob")

        class Other(Model):
            name: str = Field()

        assert Person(name="Alice") != Other(name="Alice")

    @pytest.mark.parametrize("member", ["errors", "attributes", "rules", "validate", "_errors"])
    def test_member_names_rejected(self, member):
        """Test attributes cannot shadow model members."""
        with pytest.raises(InvalidConfigError, match=member):
            type("Broken", (Model,), {member: Field()})

    @pytest.mark.parametrize("member", ["json", "get_json", "attribute_fields"])
    def test_entity_member_names_rejected(self, member):
        """Test attributes cannot shadow entity members."""
        with pytest.raises(InvalidConfigError, match=member):
            type("Broken", (JsonEntity,), {member: Field()})

    def test_member_name_remapped_field(self):
        """Test a renamed attribute reads and writes a member-named field."""
        class Response(JsonEntity):
            status = Field()
            status_errors = Field(field="errors")

        response = Response.from_json({"status": "ok", "errors": ["x"]})
        assert response.status_errors == ["x"]
        assert response.errors == {}
        assert response.json == {"status": "ok", "errors": ["x"]}


class TestCapabilities:
    """Tests for capability markers."""

    def test_model_capabilities(self):
        """Test models validate themselves and accept bulk assignment."""
        person = Person()
        assert isinstance(person, Validatable)
        assert isinstance(person, BulkAssignable)
        assert not isinstance(person, JsonSerializable)

    def test_entity_capabilities(self):
        """Test entities serialize themselves."""
        class Entity(JsonEntity):
            name = Field()

        assert isinstance(Entity(), JsonSerializable)

    def test_plain_objects(self):
        """Test plain objects have no capabilities."""
        assert not isinstance(object(), Validatable)
        assert not isinstance({}, BulkAssignable)
