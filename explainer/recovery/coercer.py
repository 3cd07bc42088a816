"""Force a loosely-typed parsed object into flat string fields."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping

import structlog

from explainer.core.models import RecordSchema

logger = structlog.get_logger(__name__)


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _inline_text(value: Any) -> str:
    if isinstance(value, (dict, list)) or value is None:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return _scalar_text(value)


def _flatten(value: Any) -> str:
    items = value.items() if isinstance(value, Mapping) else enumerate(value)
    return "\n\n".join(f"**{key}**: {_inline_text(item)}" for key, item in items)


def coerce_field(value: Any) -> str:
    """
    Render one parsed JSON value as field text.

    Mappings become ``**key**: value`` paragraphs in mapping order, lists are
    keyed by position, anything nested deeper is compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        try:
            return _flatten(value)
        except Exception as exc:  # noqa: BLE001
            logger.debug("field_flatten_failed", error=str(exc), error_type=type(exc).__name__)
            try:
                return str(value)
            except RecursionError:
                return ""
    return _scalar_text(value)


def coerce_record(data: Mapping[str, Any], schema: RecordSchema) -> Dict[str, str]:
    """
    Coerce the schema's fields of ``data`` to strings.

    Fields missing from ``data`` stay missing and names outside the schema
    are dropped; the caller decides how to default absent fields.
    """
    return {name: coerce_field(data[name]) for name in schema.fields if name in data}
