"""
Data models and type definitions for the explainer application.

A ``RecordSchema`` describes the flat record the recovery pipeline must
produce; ``StructuredAnswer`` is the six-field record rendered to students.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

ANSWER_FIELDS: Tuple[str, ...] = (
    "summary",
    "answer",
    "explanation",
    "analysis",
    "derivation",
    "practice",
)

FALLBACK_SUMMARY = "Automatic formatting of the model response failed"
FALLBACK_EXPLANATION = (
    "The response could not be converted into the expected structure, even after an "
    "automatic repair attempt. The original model output is shown in the derivation section."
)


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field names of a flat string record, plus its fallback layout."""

    name: str
    fields: Tuple[str, ...]
    raw_field: str
    diagnostics: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError("RecordSchema needs at least one field")
        if len(set(self.fields)) != len(self.fields):
            raise ValueError(f"Duplicate field names in schema {self.name!r}")
        if self.raw_field not in self.fields:
            raise ValueError(f"raw_field {self.raw_field!r} is not a field of {self.name!r}")
        unknown = set(self.diagnostics) - set(self.fields)
        if unknown:
            raise ValueError(f"Diagnostics for unknown fields: {sorted(unknown)}")

    def blank(self) -> Dict[str, str]:
        return {name: "" for name in self.fields}

    def complete(self, partial: Mapping[str, Any]) -> Dict[str, str]:
        """Return a record with every schema field, in schema order."""
        record = self.blank()
        for name in self.fields:
            value = partial.get(name)
            if isinstance(value, str):
                record[name] = value
        return record


STRUCTURED_ANSWER_SCHEMA = RecordSchema(
    name="structured_answer",
    fields=ANSWER_FIELDS,
    raw_field="derivation",
    diagnostics={
        "summary": FALLBACK_SUMMARY,
        "explanation": FALLBACK_EXPLANATION,
    },
)


class StructuredAnswer(BaseModel):
    """Explanation of one exam question; every field is Markdown/LaTeX source."""

    summary: str = ""
    answer: str = ""
    explanation: str = ""
    analysis: str = ""
    derivation: str = ""
    practice: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "StructuredAnswer":
        return cls(**STRUCTURED_ANSWER_SCHEMA.complete(record))

    def to_record(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in ANSWER_FIELDS}


class RecoveryConfidence(str, Enum):
    """
    Which stage of the cascade produced a parseable object.

    ``RESCUED`` extends the usual three values: it marks a record whose
    closing brackets were guessed after a truncated response, so consumers
    matching on confidence must handle it alongside ``SANITIZED``.
    """

    DIRECT = "direct"
    SANITIZED = "sanitized"
    RESCUED = "rescued"
    SECONDARY_REPAIR = "secondary-repair"


@dataclass(frozen=True)
class RecoveryOutcome:
    """Result of one pipeline run. Always carries a complete record."""

    record: Dict[str, str]

    @property
    def fallback_used(self) -> bool:
        return False

    @property
    def confidence(self) -> Optional[RecoveryConfidence]:
        return None

    def to_structured_answer(self) -> StructuredAnswer:
        return StructuredAnswer.from_record(self.record)

    def to_dict(self) -> Dict[str, Any]:
        """Response payload for the presentation layer."""
        return {
            "success": True,
            "data": dict(self.record),
            "recovery": {
                "status": "fallback" if self.fallback_used else "recovered",
                "confidence": self.confidence.value if self.confidence else None,
            },
        }


@dataclass(frozen=True)
class Recovered(RecoveryOutcome):
    """A parseable object was found and coerced."""

    stage: RecoveryConfidence = RecoveryConfidence.DIRECT

    @property
    def confidence(self) -> Optional[RecoveryConfidence]:
        return self.stage


@dataclass(frozen=True)
class FallbackUsed(RecoveryOutcome):
    """Every recovery stage failed; the raw text is preserved in the record."""

    raw_text: str = ""

    @property
    def fallback_used(self) -> bool:
        return True
