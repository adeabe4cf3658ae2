"""Case conversion between snake_case storage names and camelCase wire names.

Schemas get this for free through ``CamelModel``; these helpers cover the
free-form dicts (audit details, cached payloads) that never pass through
a schema.
"""
from typing import Any

from pydantic.alias_generators import to_camel, to_snake


def dict_keys_to_camel(obj: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(obj, dict):
        return {to_camel(k): dict_keys_to_camel(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_camel(x) for x in obj]
    return obj


def dict_keys_to_snake(obj: Any) -> Any:
    """Recursively convert dict keys from camelCase to snake_case."""
    if isinstance(obj, dict):
        return {to_snake(k): dict_keys_to_snake(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [dict_keys_to_snake(x) for x in obj]
    return obj
