"""
Recovery cascade from raw model text to a complete flat record.

Order: extracted text as-is, sanitized text, truncation patch, one secondary
repair call (optional), fallback record. The public entry points never raise.
"""

from __future__ import annotations

import inspect
import json
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

import structlog

from explainer.core.logging import preview
from explainer.core.models import (
    STRUCTURED_ANSWER_SCHEMA,
    Recovered,
    RecordSchema,
    RecoveryConfidence,
    RecoveryOutcome,
)
from explainer.recovery.coercer import coerce_record
from explainer.recovery.extractor import extract_json_span
from explainer.recovery.fallback import build_fallback
from explainer.recovery.repair import AsyncSecondaryRepairer, SecondaryRepairer
from explainer.recovery.sanitizer import patch_truncated_json, sanitize_json_text

logger = structlog.get_logger(__name__)

RepairFn = Callable[[str], str]
AsyncRepairFn = Callable[[str], Union[str, Awaitable[str]]]
Parsed = Tuple[Dict[str, Any], RecoveryConfidence]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _load_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def parse_candidate(text: str, extraction: str = "outer") -> Optional[Parsed]:
    """Run the local parse attempts in order; ``None`` when all of them fail."""
    candidate = extract_json_span(text, extraction)

    data = _load_object(candidate)
    if data is not None:
        return data, RecoveryConfidence.DIRECT

    data = _load_object(sanitize_json_text(candidate))
    if data is not None:
        return data, RecoveryConfidence.SANITIZED

    patched = patch_truncated_json(text)
    if patched is not None:
        data = _load_object(patched)
        if data is not None:
            return data, RecoveryConfidence.RESCUED

    return None


def _finish(parsed: Parsed, schema: RecordSchema) -> RecoveryOutcome:
    data, stage = parsed
    coerced = coerce_record(data, schema)
    if not coerced:
        logger.warning("recovered_without_known_fields", stage=stage.value, keys=sorted(data)[:10])
    logger.info("recovery_succeeded", stage=stage.value, fields=len(coerced))
    return Recovered(record=schema.complete(coerced), stage=stage)


def _fallback(raw: str, schema: RecordSchema) -> RecoveryOutcome:
    logger.warning("recovery_fallback_used", raw_length=len(raw), raw_preview=preview(raw))
    return build_fallback(raw, schema)


def _parse_repaired(repaired: Any, extraction: str) -> Optional[Parsed]:
    if not isinstance(repaired, str):
        logger.warning("secondary_repair_invalid_output", output_type=type(repaired).__name__)
        return None
    parsed = parse_candidate(repaired, extraction)
    if parsed is None:
        logger.warning("secondary_repair_unparseable", output_preview=preview(repaired))
        return None
    return parsed[0], RecoveryConfidence.SECONDARY_REPAIR


def recover(
    raw: Optional[str],
    *,
    schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA,
    repair: Optional[RepairFn] = None,
    extraction: str = "outer",
) -> RecoveryOutcome:
    """
    Recover a complete record from one model response.

    Args:
        raw: Full text returned by the model
        schema: Record shape to produce
        repair: Optional secondary-repair delegate, called at most once
        extraction: ``outer`` brace span or ``balanced`` object scan

    Returns:
        ``Recovered`` or ``FallbackUsed``; never raises
    """
    raw = raw or ""
    parsed = parse_candidate(raw, extraction)

    if parsed is None and repair is not None:
        logger.info("secondary_repair_started", raw_length=len(raw))
        try:
            repaired = repair(raw)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "secondary_repair_failed", error=str(exc), error_type=type(exc).__name__
            )
        else:
            if inspect.iscoroutine(repaired):
                # Async delegates belong to arecover; never leave the coroutine pending.
                repaired.close()
                logger.warning("secondary_repair_needs_await")
            else:
                parsed = _parse_repaired(repaired, extraction)

    if parsed is None:
        return _fallback(raw, schema)
    return _finish(parsed, schema)


async def arecover(
    raw: Optional[str],
    *,
    schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA,
    repair: Optional[AsyncRepairFn] = None,
    extraction: str = "outer",
) -> RecoveryOutcome:
    """Async :func:`recover`; the repair delegate may be sync or async."""
    raw = raw or ""
    parsed = parse_candidate(raw, extraction)

    if parsed is None and repair is not None:
        logger.info("secondary_repair_started", raw_length=len(raw))
        try:
            repaired = repair(raw)
            if inspect.isawaitable(repaired):
                repaired = await repaired
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "secondary_repair_failed", error=str(exc), error_type=type(exc).__name__
            )
        else:
            parsed = _parse_repaired(repaired, extraction)

    if parsed is None:
        return _fallback(raw, schema)
    return _finish(parsed, schema)


class RecoveryPipeline:
    """Configured recovery for one record shape."""

    def __init__(
        self,
        schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA,
        repair: Optional[AsyncRepairFn] = None,
        extraction: str = "outer",
    ) -> None:
        self.schema = schema
        self.repair = repair
        self.extraction = extraction

    @classmethod
    def from_settings(
        cls,
        settings,
        client: Any = None,
        schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA,
    ) -> "RecoveryPipeline":
        """Wire secondary repair when it is enabled and a chat client exists."""
        repair = None
        if settings.recovery.secondary_repair and client is not None:
            repairer_cls = (
                AsyncSecondaryRepairer
                if inspect.iscoroutinefunction(client.run_chat)
                else SecondaryRepairer
            )
            repair = repairer_cls(
                client,
                schema=schema,
                model=settings.repair_model,
                temperature=settings.recovery.repair_temperature,
            )
        return cls(schema=schema, repair=repair, extraction=settings.recovery.extraction)

    def run(self, raw: Optional[str]) -> RecoveryOutcome:
        return recover(raw, schema=self.schema, repair=self.repair, extraction=self.extraction)

    async def arun(self, raw: Optional[str]) -> RecoveryOutcome:
        return await arecover(
            raw, schema=self.schema, repair=self.repair, extraction=self.extraction
        )
