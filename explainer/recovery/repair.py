"""
Secondary repair: ask a model to re-emit a broken payload as clean JSON.

The repairer is a plain callable ``raw_text -> text`` so the pipeline does
not care whether it talks to a real endpoint or a test double.
"""

from __future__ import annotations

from typing import Any, Optional

from explainer.clients.llm_client import build_messages
from explainer.core.models import STRUCTURED_ANSWER_SCHEMA, RecordSchema

REPAIR_SYSTEM_PROMPT = """You are a data-cleaning assistant that repairs JSON.
The text you receive was meant to be a single JSON object but is broken: it may
contain raw line breaks inside string values, bad backslash escapes, nested
objects where strings were expected, chatter around the object, or it may be
cut off.

Rules:
1. Output nothing but the JSON object. No greeting, no explanation, no ``` fences.
   The output must start with {{ and end with }}.
2. The object must contain exactly these keys and no others: {fields}.
3. Every value must be a flat string. If a value is a nested object such as
   {{"1": "...", "2": "..."}}, merge it into one string: "1: ...\\n\\n2: ...".
4. Escape every line break inside a value as \\n. Never put a physical line
   break inside a string value. Keep LaTeX and Markdown content intact.
5. If parts of the text are unreadable, infer the most plausible content from
   what remains rather than dropping the key."""


def build_repair_system_prompt(schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA) -> str:
    fields = ", ".join(f'"{name}"' for name in schema.fields)
    return REPAIR_SYSTEM_PROMPT.format(fields=fields)


def build_repair_prompt(raw_text: str) -> str:
    return (
        "Extract the information from the malformed text below, merge nested "
        "objects into strings and return valid JSON:\n\n"
        f"{raw_text}"
    )


class SecondaryRepairer:
    """Calls a chat client once per failed response."""

    def __init__(
        self,
        client: Any,
        *,
        schema: RecordSchema = STRUCTURED_ANSWER_SCHEMA,
        model: Optional[str] = None,
        temperature: float = 0.1,
    ) -> None:
        self._client = client
        self.schema = schema
        self.model = model
        self.temperature = temperature

    def messages(self, raw_text: str) -> list:
        return build_messages(build_repair_system_prompt(self.schema), build_repair_prompt(raw_text))

    def __call__(self, raw_text: str) -> str:
        return self._client.run_chat(
            self.messages(raw_text), model=self.model, temperature=self.temperature
        )


class AsyncSecondaryRepairer(SecondaryRepairer):
    """Same prompt, awaited against an async chat client."""

    async def __call__(self, raw_text: str) -> str:
        return await self._client.run_chat(
            self.messages(raw_text), model=self.model, temperature=self.temperature
        )
