"""Unit tests for the solve service."""

import asyncio

import pytest

from explainer.core.config import get_settings
from explainer.core.exceptions import ExternalServiceError, LLMError, ValidationError
from explainer.core.models import FallbackUsed, Recovered, RecoveryConfidence
from explainer.services.solve_service import TUTOR_SYSTEM_PROMPT, SolveService
from tests.sample_data import (
    BROKEN_RESPONSE,
    CLEAN_RECORD,
    CLEAN_RESPONSE,
    WRAPPED_RESPONSE,
    AsyncFakeChatClient,
    FakeChatClient,
)


@pytest.fixture
def solve_settings(monkeypatch):
    monkeypatch.setenv("LLM_MAX_ATTEMPTS", "2")
    return get_settings()


def test_solve_recovers_primary_answer(solve_settings):
    client = FakeChatClient(WRAPPED_RESPONSE)
    outcome = SolveService(client, settings=solve_settings).solve("  What is 1 + 1?  ")

    assert isinstance(outcome, Recovered)
    assert outcome.record == CLEAN_RECORD
    call = client.calls[0]
    assert call["messages"][0]["content"] == TUTOR_SYSTEM_PROMPT
    assert call["messages"][1]["content"] == "What is 1 + 1?"
    assert call["model"] is None  # client default model


def test_solve_uses_secondary_repair_once(solve_settings):
    client = FakeChatClient(BROKEN_RESPONSE, CLEAN_RESPONSE)
    outcome = SolveService(client, settings=solve_settings).solve("question")

    assert outcome.confidence is RecoveryConfidence.SECONDARY_REPAIR
    assert len(client.calls) == 2
    assert client.calls[1]["temperature"] == solve_settings.recovery.repair_temperature


def test_solve_falls_back_when_repair_fails(solve_settings):
    client = FakeChatClient(BROKEN_RESPONSE, LLMError("repair down"))
    outcome = SolveService(client, settings=solve_settings).solve("question")

    assert isinstance(outcome, FallbackUsed)
    assert outcome.record["derivation"] == BROKEN_RESPONSE
    assert len(client.calls) == 2  # repair is never retried


def test_primary_call_is_retried(solve_settings):
    client = FakeChatClient(ExternalServiceError("llm", "503"), CLEAN_RESPONSE)
    outcome = SolveService(client, settings=solve_settings).solve("question")

    assert outcome.record == CLEAN_RECORD
    assert len(client.calls) == 2


def test_primary_failure_propagates(solve_settings):
    client = FakeChatClient(LLMError("down"), LLMError("still down"))
    with pytest.raises(LLMError):
        SolveService(client, settings=solve_settings).solve("question")
    assert len(client.calls) == 2


def test_empty_question_is_rejected(solve_settings):
    client = FakeChatClient()
    with pytest.raises(ValidationError):
        SolveService(client, settings=solve_settings).solve("   ")
    assert client.calls == []


def test_asolve(solve_settings):
    client = AsyncFakeChatClient(BROKEN_RESPONSE, CLEAN_RESPONSE)
    outcome = asyncio.run(SolveService(client, settings=solve_settings).asolve("question"))

    assert outcome.confidence is RecoveryConfidence.SECONDARY_REPAIR
    assert outcome.record == CLEAN_RECORD


def test_prompt_names_every_field():
    for name in CLEAN_RECORD:
        assert f'"{name}"' in TUTOR_SYSTEM_PROMPT
