"""Unit tests for the secondary-repair prompt and delegates."""

import asyncio

from explainer.core.models import RecordSchema
from explainer.recovery.repair import (
    AsyncSecondaryRepairer,
    SecondaryRepairer,
    build_repair_prompt,
    build_repair_system_prompt,
)
from tests.sample_data import AsyncFakeChatClient, FakeChatClient


def test_system_prompt_lists_exact_field_names():
    prompt = build_repair_system_prompt()
    assert '"summary", "answer", "explanation", "analysis", "derivation", "practice"' in prompt
    assert "```" in prompt  # forbids code fences
    assert '{"1": "...", "2": "..."}' in prompt
    assert '"1: ...\\n\\n2: ..."' in prompt


def test_system_prompt_follows_schema():
    schema = RecordSchema(name="note", fields=("title", "body"), raw_field="body")
    prompt = build_repair_system_prompt(schema)
    assert '"title", "body"' in prompt
    assert "summary" not in prompt


def test_user_prompt_carries_raw_text_verbatim():
    raw = '{"summary": "broken\n'
    assert build_repair_prompt(raw).endswith(raw)


def test_repairer_calls_client_once_with_settings():
    client = FakeChatClient("{}")
    repairer = SecondaryRepairer(client, model="cleaner", temperature=0.1)

    assert repairer("bad payload") == "{}"
    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["model"] == "cleaner"
    assert call["temperature"] == 0.1
    assert call["messages"][0]["role"] == "system"
    assert call["messages"][1]["role"] == "user"
    assert "bad payload" in call["messages"][1]["content"]


def test_async_repairer_awaits_client():
    client = AsyncFakeChatClient("{}")
    repairer = AsyncSecondaryRepairer(client)

    assert asyncio.run(repairer("bad payload")) == "{}"
    assert client.calls[0]["model"] is None
