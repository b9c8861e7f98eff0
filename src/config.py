"""Configuration management for Text-to-SQL Explorer"""
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # OpenAI Configuration
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    openai_temperature: float = Field(default=0.1, alias="OPENAI_TEMPERATURE")  # near-deterministic SQL
    openai_timeout: int = Field(default=30, alias="OPENAI_TIMEOUT")

    # Data source Configuration
    demo_backend: Literal["sqlite", "mock"] = Field(default="sqlite", alias="DEMO_BACKEND")
    max_upload_bytes: int = Field(default=100 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    url_fetch_timeout_seconds: int = Field(default=30, alias="URL_FETCH_TIMEOUT_SECONDS")

    # Application Configuration
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    max_rows_return: int = Field(default=1000, alias="MAX_ROWS_RETURN")

    # Server Configuration
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")

    # Gradio Configuration
    gradio_share: bool = Field(default=False, alias="GRADIO_SHARE")
    gradio_server_port: int = Field(default=7860, alias="GRADIO_SERVER_PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def has_api_key(self) -> bool:
        """True when a non-placeholder OpenAI key is configured."""
        _placeholder_keys = {"your-api-key-here", "sk-xxx", "your_api_key", ""}
        return self.openai_api_key.strip().lower() not in _placeholder_keys


# Load settings from environment
settings = Settings()
