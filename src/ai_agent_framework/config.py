"""
Configuration management for the AI Agent Framework

Uses pydantic-settings for environment variable parsing and validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal["openai", "anthropic", "google", "openrouter", "local"]


class LLMConfig(BaseSettings):
    """Configuration for a single LLM provider."""

    model_config = SettingsConfigDict(extra="ignore")

    provider: str = "openai"
    model: str = "gpt-4o"
    api_key: str = ""
    base_url: str | None = None
    max_tokens: int = 1000
    temperature: float = 0.7
    summary_temperature: float = 0.3


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # Application
    app_name: str = "AI-Agent-Framework"
    debug: bool = False
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # LLM Providers (API Keys)
    openai_api_key: str = Field(default="", description="OpenAI API key")
    anthropic_api_key: str = Field(default="", description="Anthropic API key for Claude")
    google_api_key: str = Field(default="", description="Google AI API key for Gemini")
    openrouter_api_key: str = Field(default="", description="OpenRouter API key")
    local_base_url: str = Field(
        default="http://localhost:1234/v1",
        description="Base URL of an OpenAI-compatible local model server",
    )

    # Default model settings
    default_provider: ProviderName = "openai"
    default_model: str = "gpt-4o"
    max_tokens: int = 1000
    temperature: float = 0.7
    summarization_temperature: float = 0.3

    # Storage
    store_backend: Literal["memory", "sql"] = Field(
        default="sql",
        description="Where templates and agent state are kept",
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/agents.db",
        description="Database connection URL"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() if v else "INFO"

    def get_llm_config(self, provider: str | None = None) -> LLMConfig:
        """Get LLM configuration for a provider."""
        provider = provider or self.default_provider

        api_key_map = {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "google": self.google_api_key,
            "openrouter": self.openrouter_api_key,
            "local": "not-needed",
        }

        model_map = {
            "openai": "gpt-4o",
            "anthropic": "claude-sonnet-4-20250514",
            "google": "gemini-2.5-flash",
            "openrouter": "openai/gpt-4o",
            "local": "local-model",
        }

        base_url_map = {
            "openai": None,
            "anthropic": None,
            "google": "https://generativelanguage.googleapis.com/v1beta/openai/",
            "openrouter": "https://openrouter.ai/api/v1",
            "local": self.local_base_url,
        }

        if provider == self.default_provider:
            model = self.default_model
        else:
            model = model_map.get(provider, self.default_model)

        return LLMConfig(
            provider=provider,
            model=model,
            api_key=api_key_map.get(provider, ""),
            base_url=base_url_map.get(provider),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            summary_temperature=self.summarization_temperature,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
