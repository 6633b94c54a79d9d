"""
Configuration module using Pydantic Settings.

Loads the Azure OpenAI endpoint, deployment and request limits from
environment variables. Supports .env files for local development.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_DOCUMENT_BYTES = 5 * 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Azure OpenAI
    azure_openai_endpoint: str
    azure_openai_chat_deployment: str = "gpt-4o"
    azure_openai_api_version: str = "2024-10-21"
    # Leave empty to authenticate with Entra ID (DefaultAzureCredential)
    azure_openai_api_key: str = ""
    openai_timeout_seconds: float = 60.0
    llm_temperature: float = 0.2

    # Uploads
    max_document_bytes: int = MAX_DOCUMENT_BYTES

    # Application Insights
    applicationinsights_connection_string: str = ""

    # App
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Factory for cached settings instance."""
    return Settings()
