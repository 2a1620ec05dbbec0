"""Tests for the field map cache and entity registry."""

import threading
from unittest.mock import Mock

import pytest

from json_entity import (
    EntityRegistry,
    Field,
    FieldMapCache,
    InvalidConfigError,
    JsonEntity,
    entity_registry,
    register_entity,
)


class TestFieldMapCache:
    """Tests for FieldMapCache."""

    def test_computed_once(self):
        """Test the factory runs only on first access."""
        cache = FieldMapCache()
        factory = Mock(return_value={"userName": "user_name"})

        class Account:
            pass

        first = cache.get_or_compute(Account, factory)
        second = cache.get_or_compute(Account, factory)

        assert first == {"userName": "user_name"}
        assert second is first
        factory.assert_called_once_with()

    def test_keyed_by_class(self):
        """Test each class gets its own entry."""
        cache = FieldMapCache()

        class A:
            pass

        class B:
            pass

        cache.get_or_compute(A, lambda: {"a": "x"})
        assert cache.get_or_compute(B, lambda: {"b": "y"}) == {"b": "y"}
        assert A in cache
        assert B in cache

    def test_clear(self):
        """Test clearing drops all entries."""
        cache = FieldMapCache()

        class A:
            pass

        cache.get_or_compute(A, dict)
        cache.clear()
        assert A not in cache

    def test_concurrent_first_access(self):
        """Test threads racing on first access share one computed map."""
        cache = FieldMapCache()
        results = []

        class A:
            pass

        def worker():
            results.append(cache.get_or_compute(A, lambda: {"a": "b"}))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(result is results[0] for result in results)


class TestEntityRegistry:
    """Tests for EntityRegistry."""

    def test_register_and_get(self):
        """Test registering and getting a class."""
        registry = EntityRegistry()

        class Person(JsonEntity):
            name = Field()

        registry.register(Person)
        assert registry.get("Person") is Person

    def test_register_with_name(self):
        """Test registering under an explicit name."""
        registry = EntityRegistry()

        class Person(JsonEntity):
            name = Field()

        registry.register(Person, "people.Person")
        assert registry.get("people.Person") is Person
        assert registry.get("Person") is None

    def test_resolve(self):
        """Test classes resolve to themselves and names to classes."""
        registry = EntityRegistry()

        class Person(JsonEntity):
            name = Field()

        registry.register(Person)
        assert registry.resolve(Person) is Person
        assert registry.resolve("Person") is Person

    @pytest.mark.parametrize("ref", ["Unknown", "", None, 42])
    def test_resolve_invalid(self, ref):
        """Test unresolvable references are configuration errors."""
        with pytest.raises(InvalidConfigError):
            EntityRegistry().resolve(ref)

    def test_all_entities_and_clear(self):
        """Test listing and clearing registered classes."""
        registry = EntityRegistry()

        class Person(JsonEntity):
            name = Field()

        class Article(JsonEntity):
            title = Field()

        registry.register(Person)
        registry.register(Article)
        assert set(registry.all_entities()) == {Person, Article}

        registry.clear()
        assert registry.all_entities() == []

    def test_register_entity_decorator(self):
        """Test @register_entity uses the global registry."""
        @register_entity
        class Person(JsonEntity):
            name = Field()

        assert entity_registry.get("Person") is Person

    def test_self_reference_by_name(self):
        """Test an entity refers to its own class by name without registration."""
        class Category(JsonEntity):
            name = Field()
            children = Field(entity=["Category"])

        tree = Category.from_json({"name": "root", "children": [{"name": "leaf"}]})
        assert isinstance(tree.children[0], Category)
        assert tree.json == {"name": "root", "children": [{"name": "leaf"}]}
