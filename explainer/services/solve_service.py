"""
Solve service: one exam question in, one structured explanation out.

The primary chat call may fail and raise; everything after it goes through
the recovery pipeline, which always yields a complete record.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from explainer.clients.llm_client import build_messages
from explainer.core.config import Settings, get_settings
from explainer.core.exceptions import ExternalServiceError, LLMError, ValidationError
from explainer.core.models import RecoveryOutcome
from explainer.recovery.pipeline import RecoveryPipeline
from explainer.utils.reliability import track_performance, with_retry

logger = structlog.get_logger(__name__)

TUTOR_SYSTEM_PROMPT = """You are a senior high-school science and mathematics teacher.

OUTPUT FORMAT (critical)
Reply with exactly one JSON object in this shape and nothing else:
{
  "summary": "one sentence naming the question type and what it tests",
  "answer": "the final answer, e.g. C, D or a value",
  "explanation": "one sentence on why that is the answer",
  "analysis": "Markdown breakdown of the key concepts and common pitfalls",
  "derivation": "Markdown step-by-step derivation without skipped steps",
  "practice": "Markdown variant exercise with a short solution outline"
}

LATEX
- Wrap every formula and variable in $...$, e.g. $f(x) = x^2$
- Put display formulas in $$...$$
- Formulas in the answer field also need $...$

CONTENT
- summary: short, e.g. "Piecewise function properties (parity, monotonicity, zeros)"
- answer: the conclusion only, e.g. "C, D"
- explanation: a single concise sentence
- analysis: core concepts and traps, lists are fine
- derivation: rigorous reasoning, every step shown
- practice: one variant question with a solution outline

The question text comes from OCR and may contain mistakes; infer the intended
question. Output only the JSON object, without ```json fences."""

_TRANSIENT_ERRORS = (LLMError, ExternalServiceError)


class SolveService:
    """Runs the primary model call and recovers its structured answer."""

    def __init__(
        self,
        client: Any,
        settings: Optional[Settings] = None,
        pipeline: Optional[RecoveryPipeline] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.pipeline = pipeline or RecoveryPipeline.from_settings(self.settings, client)
        self._chat = with_retry(
            max_attempts=self.settings.llm_max_attempts,
            retry_exceptions=_TRANSIENT_ERRORS,
        )(client.run_chat)

    @staticmethod
    def _messages(question_text: Optional[str]) -> list:
        question = (question_text or "").strip()
        if not question:
            raise ValidationError("Question text is empty")
        return build_messages(TUTOR_SYSTEM_PROMPT, question)

    @track_performance("solve")
    def solve(self, question_text: str) -> RecoveryOutcome:
        """Ask the model for an explanation and recover the structured record."""
        messages = self._messages(question_text)
        logger.info("solve_started", question_length=len(messages[1]["content"]))
        raw = self._chat(messages)
        return self.pipeline.run(raw)

    async def asolve(self, question_text: str) -> RecoveryOutcome:
        messages = self._messages(question_text)
        logger.info("solve_started", question_length=len(messages[1]["content"]))
        raw = await self._chat(messages)
        return await self.pipeline.arun(raw)
