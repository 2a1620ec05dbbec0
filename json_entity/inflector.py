"""Attribute name inflection."""

from pydantic.alias_generators import to_snake


def camel_to_snake(name: str) -> str:
    """
    Convert a camelCase identifier to its snake_case JSON field name.

    Names that are already lowercase with underscores are returned unchanged.

    Example:
        camel_to_snake("entityTitle")  # -> "entity_title"
        camel_to_snake("my_name")  # -> "my_name"

    """
    return to_snake(name)
