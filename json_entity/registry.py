"""Process-wide caches and registries for entity classes."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from json_entity.exceptions import InvalidConfigError

if TYPE_CHECKING:
    from json_entity.entity import JsonEntity

E = TypeVar("E", bound=type)


class FieldMapCache:
    """
    Per-class cache of derived attribute-field maps.

    Entries are keyed by class identity, computed on first access and never
    invalidated. Computation is idempotent, so the lock only prevents two
    threads from doing the same work on first access.

    Example:
        cache = FieldMapCache()
        fields = cache.get_or_compute(Order, lambda: {"orderId": "order_id"})

    """

    __slots__ = ("_maps", "_lock")

    def __init__(self) -> None:
        self._maps: dict[type, dict[str, str | None]] = {}
        self._lock = threading.Lock()

    def get_or_compute(
        self,
        cls: type,
        factory: Callable[[], dict[str, str | None]],
    ) -> dict[str, str | None]:
        """
        Get the cached map for a class, computing it on first use.

        Args:
            cls: The entity class
            factory: Computes the map when it is not cached yet

        Returns:
            The cached map (callers must not mutate it)

        """
        cached = self._maps.get(cls)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._maps.get(cls)
            if cached is None:
                cached = factory()
                self._maps[cls] = cached
        return cached

    def __contains__(self, cls: type) -> bool:
        return cls in self._maps

    def clear(self) -> None:
        """Drop all cached maps."""
        with self._lock:
            self._maps.clear()


# Global field map cache instance
field_map_cache = FieldMapCache()


class EntityRegistry:
    """
    Registry of entity classes by name.

    Enables string class references in attribute-entities declarations,
    including references to the declaring class itself or to classes
    defined later in the module.

    Example:
        registry = EntityRegistry()
        registry.register(Order)
        registry.resolve("Order")  # -> Order

    """

    __slots__ = ("_by_name",)

    def __init__(self) -> None:
        self._by_name: dict[str, type] = {}

    def register(self, cls: type, name: str | None = None) -> None:
        """
        Register a class.

        Args:
            cls: The class to register
            name: Registration name (default: the class name)

        """
        self._by_name[name or cls.__name__] = cls

    def get(self, name: str) -> type | None:
        """Get a class by registered name, or None."""
        return self._by_name.get(name)

    def resolve(self, ref: Any) -> type:
        """
        Resolve a class reference.

        Args:
            ref: A class, or the registered name of one

        Returns:
            The class

        Raises:
            InvalidConfigError: If the reference cannot be resolved

        """
        if isinstance(ref, type):
            return ref
        if isinstance(ref, str) and ref:
            cls = self._by_name.get(ref)
            if cls is not None:
                return cls
            raise InvalidConfigError(f"Entity class is not registered: {ref}")
        raise InvalidConfigError(f"Invalid entity class reference: {ref!r}")

    def all_entities(self) -> list[type]:
        """Get all registered classes."""
        return list(self._by_name.values())

    def clear(self) -> None:
        """Clear all registered classes."""
        self._by_name.clear()


# Global entity registry instance
entity_registry = EntityRegistry()


def register_entity(cls: E) -> E:
    """
    Register a class with the global entity registry.

    Usage:
        @register_entity
        class Category(JsonEntity):
            children: list[Category] = Field(entity=["Category"])

    Returns:
        The class unchanged

    """
    entity_registry.register(cls)
    return cls


def resolve_entity_class(ref: Any) -> type[JsonEntity] | type:
    """Resolve a class reference through the global registry."""
    return entity_registry.resolve(ref)
