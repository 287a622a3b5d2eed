"""
Application configuration.
All values come from environment variables (or .env), grouped by prefix.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Local SQLite store settings."""

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    path: str = "./data/promotor.db"
    echo: bool = False

    @property
    def async_url(self) -> str:
        """URL for the aiosqlite driver."""
        if self.path == ":memory:":
            return "sqlite+aiosqlite://"
        return f"sqlite+aiosqlite:///{self.path}"

    def ensure_directory(self) -> None:
        """Create the parent directory of the database file."""
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)


class StorageConfig(BaseSettings):
    """Uploaded file storage."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", env_file=".env", extra="ignore")

    dir: str = "./data/uploads"
    max_upload_mb: int = 25

    @property
    def max_upload_bytes(self) -> int:
        """Upload limit in bytes."""
        return self.max_upload_mb * 1024 * 1024


class LLMConfig(BaseSettings):
    """Hosted LLM (Gemini REST API) settings.

    Chat, feasibility narratives and document field extraction all go
    through the same endpoint, each with its own model.
    """

    model_config = SettingsConfigDict(env_prefix="LLM_", env_file=".env", extra="ignore")

    api_key: str = ""
    api_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    # Request timeout (seconds); thinking-mode calls are slow
    timeout: int = 120
    chat_model: str = "gemini-3-pro-preview"
    analysis_model: str = "gemini-3-pro-preview"
    extraction_model: str = "gemini-2.5-flash"
    # Thinking token budget for feasibility analysis
    thinking_budget: int = 32768

    @property
    def is_configured(self) -> bool:
        """Whether an API key is available."""
        return bool(self.api_key.strip())


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    format: str = "console"


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(env_prefix="METRICS_", env_file=".env", extra="ignore")

    enabled: bool = True


class AppConfig(BaseSettings):
    """General application settings."""

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=".env", extra="ignore")

    name: str = "Promotor"
    version: str = "1.0.0"
    debug: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    seed_demo_data: bool = True
    company_name: str = "Inmobiliaria Demo S.L."
    currency: str = "EUR"

    @property
    def cors_origins_list(self) -> list[str]:
        """List of CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class Settings:
    """Aggregates all configuration groups."""

    def __init__(self) -> None:
        self.db = DatabaseConfig()
        self.storage = StorageConfig()
        self.llm = LLMConfig()
        self.logging = LoggingConfig()
        self.metrics = MetricsConfig()
        self.app = AppConfig()


@lru_cache
def get_settings() -> Settings:
    """Get the settings singleton (cached)."""
    return Settings()


settings = get_settings()
