"""OpenAI-compatible chat helpers for the explainer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import openai
import structlog
from openai import AsyncOpenAI, OpenAI

from explainer.core.config import LLMConfig
from explainer.core.exceptions import ConfigurationError, ExternalServiceError, LLMError

logger = structlog.get_logger(__name__)


def build_messages(system: str, prompt: str) -> List[dict]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]


def _translate_error(exc: Exception, model: str) -> Exception:
    details: Dict[str, Any] = {"model": model, "error": str(exc)}
    if isinstance(exc, openai.APIStatusError):
        return ExternalServiceError(
            "llm", str(exc), status_code=exc.status_code, details=details
        )
    return LLMError("Chat completion call failed", details)


def _content(completion) -> str:
    if not completion.choices:
        return ""
    return completion.choices[0].message.content or ""


class _BaseClient:
    def __init__(self, config: LLMConfig) -> None:
        if not config.api_key:
            raise ConfigurationError("LLM_API_KEY is required for chat completions")
        self.model = config.model
        self.temperature = config.temperature

    def _request(
        self, messages: List[dict], model: Optional[str], temperature: Optional[float]
    ) -> Dict[str, Any]:
        return {
            "model": model or self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
        }


class LLMClient(_BaseClient):
    """Wraps chat completions with sane defaults."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = OpenAI(
            api_key=config.api_key, base_url=config.base_url, timeout=config.timeout
        )

    def run_chat(
        self,
        messages: List[dict],
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Execute a chat completion and return the text content."""
        request = self._request(messages, model, temperature)
        try:
            completion = self._client.chat.completions.create(**request)
        except openai.OpenAIError as exc:
            logger.warning("chat_completion_failed", model=request["model"], error=str(exc))
            raise _translate_error(exc, request["model"]) from exc
        return _content(completion)


class AsyncLLMClient(_BaseClient):
    """Async twin of :class:`LLMClient` for use inside request handlers."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncOpenAI(
            api_key=config.api_key, base_url=config.base_url, timeout=config.timeout
        )

    async def run_chat(
        self,
        messages: List[dict],
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        request = self._request(messages, model, temperature)
        try:
            completion = await self._client.chat.completions.create(**request)
        except openai.OpenAIError as exc:
            logger.warning("chat_completion_failed", model=request["model"], error=str(exc))
            raise _translate_error(exc, request["model"]) from exc
        return _content(completion)
