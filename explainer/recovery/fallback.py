"""Terminal record for responses nothing else could recover."""

from __future__ import annotations

from typing import Optional

from explainer.core.models import STRUCTURED_ANSWER_SCHEMA, FallbackUsed, RecordSchema


def build_fallback(
    raw_text: Optional[str], schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA
) -> FallbackUsed:
    """Diagnostic messages plus the untouched raw text in ``schema.raw_field``."""
    raw = raw_text or ""
    record = schema.blank()
    record.update(schema.diagnostics)
    record[schema.raw_field] = raw
    return FallbackUsed(record=record, raw_text=raw)
