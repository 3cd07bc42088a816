"""Configure pytest fixtures and environment for explainer tests."""

import pytest

from explainer.core.config import reset_settings

_ENV_VARS = (
    "LLM_API_KEY",
    "SILICONFLOW_API_KEY",
    "LLM_BASE_URL",
    "LLM_MODEL",
    "LLM_TEMPERATURE",
    "LLM_TIMEOUT",
    "LLM_MAX_ATTEMPTS",
    "RECOVERY_SECONDARY_REPAIR",
    "RECOVERY_REPAIR_MODEL",
    "RECOVERY_REPAIR_TEMPERATURE",
    "RECOVERY_EXTRACTION",
    "ENVIRONMENT",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep developer .env files and shell variables out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()
