"""Shared pytest fixtures for tests."""

import pytest

from json_entity.registry import entity_registry, field_map_cache


@pytest.fixture(autouse=True)
def clean_registries():
    """Give every test an empty entity registry and field map cache."""
    entity_registry.clear()
    field_map_cache.clear()
    yield
    entity_registry.clear()
    field_map_cache.clear()
