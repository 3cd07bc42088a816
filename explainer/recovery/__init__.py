"""Tolerant recovery of structured records from LLM chat output."""

from explainer.recovery.coercer import coerce_field, coerce_record
from explainer.recovery.extractor import extract_json_span
from explainer.recovery.fallback import build_fallback
from explainer.recovery.pipeline import RecoveryPipeline, arecover, parse_candidate, recover
from explainer.recovery.repair import AsyncSecondaryRepairer, SecondaryRepairer
from explainer.recovery.sanitizer import patch_truncated_json, sanitize_json_text

__all__ = [
    "AsyncSecondaryRepairer",
    "RecoveryPipeline",
    "SecondaryRepairer",
    "arecover",
    "build_fallback",
    "coerce_field",
    "coerce_record",
    "extract_json_span",
    "parse_candidate",
    "patch_truncated_json",
    "recover",
    "sanitize_json_text",
]
