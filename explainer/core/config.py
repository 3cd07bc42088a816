"""
Configuration management for the explainer application.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from rich.table import Table

EXTRACTION_STRATEGIES = ("outer", "balanced")


def _parse_flag(v) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "y")
    return bool(v)


class LLMConfig(BaseSettings):
    """Primary chat-completion endpoint (any OpenAI-compatible provider)."""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_API_KEY", "SILICONFLOW_API_KEY"),
    )
    base_url: str = Field(default="https://api.siliconflow.cn/v1", alias="LLM_BASE_URL")
    model: str = Field(default="deepseek-ai/DeepSeek-V3", alias="LLM_MODEL")
    temperature: float = Field(default=0.7, alias="LLM_TEMPERATURE")

    # Network deadline per call, enforced by the HTTP client
    timeout: float = Field(default=60.0, alias="LLM_TIMEOUT")

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


class RecoveryConfig(BaseSettings):
    """Structured-output recovery configuration."""

    secondary_repair: bool = Field(default=True, alias="RECOVERY_SECONDARY_REPAIR")
    repair_model: Optional[str] = Field(default=None, alias="RECOVERY_REPAIR_MODEL")
    repair_temperature: float = Field(default=0.1, alias="RECOVERY_REPAIR_TEMPERATURE")
    extraction: str = Field(default="outer", alias="RECOVERY_EXTRACTION")

    @field_validator("secondary_repair", mode="before")
    @classmethod
    def parse_secondary_repair(cls, v):
        return _parse_flag(v)

    @field_validator("extraction", mode="before")
    @classmethod
    def parse_extraction(cls, v):
        value = (v or "outer").strip().lower()
        if value not in EXTRACTION_STRATEGIES:
            raise ValueError(
                f"RECOVERY_EXTRACTION must be one of {', '.join(EXTRACTION_STRATEGIES)}"
            )
        return value

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: str = Field(default="production", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Component configurations
    llm: LLMConfig = Field(default_factory=LLMConfig)
    recovery: RecoveryConfig = Field(default_factory=RecoveryConfig)

    # Attempts for the primary solve call; secondary repair is never retried
    llm_max_attempts: int = Field(default=3, alias="LLM_MAX_ATTEMPTS")

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        return _parse_flag(v)

    def model_post_init(self, __context) -> None:
        # Initialize sub-configurations
        self.llm = LLMConfig()
        self.recovery = RecoveryConfig()

    @property
    def repair_model(self) -> str:
        """Model used for secondary repair; defaults to the primary model."""
        return self.recovery.repair_model or self.llm.model

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global settings
    settings = None


def validate_required_settings(for_workflow: str = "solve") -> List[str]:
    """
    Validate that required settings are present for specific workflows.

    Args:
        for_workflow: Workflow name ("solve", "recover", or "minimal")

    Returns:
        List of missing required settings
    """
    missing = []
    try:
        config = get_settings()

        if for_workflow == "solve":
            if not config.llm.api_key:
                missing.append("LLM_API_KEY")

        elif for_workflow == "recover":
            # Local recovery works offline; the key only enables secondary repair
            if config.recovery.secondary_repair and not config.llm.api_key:
                missing.append("LLM_API_KEY (secondary repair)")

        elif for_workflow == "minimal":
            # Minimal validation - just check basic config loads
            pass

    except Exception as e:
        missing.append(f"Configuration error: {e}")

    return missing


def print_configuration_summary(console: Optional[Console] = None) -> None:
    """Print a summary of the current configuration for debugging."""
    console = console or Console()
    config = get_settings()

    table = Table(title="Explainer Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Environment", config.environment)
    table.add_row("Debug Mode", "✓" if config.debug else "✗")
    table.add_row("LLM Endpoint", config.llm.base_url)
    table.add_row("LLM Model", config.llm.model)
    table.add_row("LLM API Key", "✓" if config.llm.api_key else "✗")
    table.add_row("LLM Timeout", f"{config.llm.timeout:g}s")
    table.add_row("Max Attempts", str(config.llm_max_attempts))
    table.add_row("Secondary Repair", "✓" if config.recovery.secondary_repair else "✗")
    table.add_row("Repair Model", config.repair_model)
    table.add_row("Extraction", config.recovery.extraction)

    console.print(table)
