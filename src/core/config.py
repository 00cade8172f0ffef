from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):  # type: ignore[misc]
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # GitHub
    github_token: SecretStr = Field(
        default=...,
        validation_alias=AliasChoices("github_token", "input_github_token"),
    )
    github_api_url: str = "https://api.github.com"
    github_event_path: str | None = None

    # LLM Providers
    llm_provider: Literal["openai", "anthropic", "ollama"] = "openai"
    model: str | None = Field(
        default=None,
        validation_alias=AliasChoices("model", "input_openai_api_model"),
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "input_openai_api_key"),
    )
    anthropic_api_key: SecretStr | None = None
    ollama_host: str = "http://localhost:11434"

    # Decoding (fixed so reviews are reproducible on identical input)
    max_tokens: int = Field(default=700, gt=0)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    # Review Settings
    exclude: str = Field(
        default="",
        validation_alias=AliasChoices("exclude", "input_exclude"),
    )
    max_concurrency: int = Field(default=4, ge=1)
    include_style: bool = False

    # Observability
    metrics_textfile: str | None = None

    @property
    def exclude_patterns(self) -> list[str]:
        """Comma-separated ``exclude`` split into glob patterns."""
        return [p.strip() for p in self.exclude.split(",") if p.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
