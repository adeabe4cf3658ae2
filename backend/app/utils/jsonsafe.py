"""JSON-in-a-text-column type that never raises on read.

Rows written by older clients can hold stringified objects such as
``"[object Object]"`` or half-written text. Reading those back as
``None`` keeps a single bad column from failing the whole row.
"""

import json
import logging
from typing import Any

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)

_GARBAGE = {"[object Object]", "[object Array]"}


def safe_json_loads(value: str | None) -> Any:
    """Parse JSON text, returning None for empty, garbage, or malformed input."""
    if value is None:
        return None
    text = value.strip()
    if not text or text in _GARBAGE:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        logger.warning("Discarding malformed JSON column value: %.60r", text)
        return None


class SafeJSON(TypeDecorator):
    """Store Python dicts/lists as JSON text; tolerate corrupt stored values."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> str | None:
        if value is None:
            return None
        return json.dumps(value, default=str)

    def process_result_value(self, value: str | None, dialect) -> Any:
        return safe_json_loads(value)
