"""Configuration management for the KOTA OS engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Anthropic configuration (required)
    ANTHROPIC_API_KEY: str = Field(..., description="Anthropic API key")

    # Environment
    KOTA_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")

    # Models
    CHAT_MODEL: str = Field(
        default="claude-sonnet-4-5-20250929", description="Model for assistant replies"
    )
    EXTRACTION_MODEL: str = Field(
        default="claude-haiku-4-5-20251001", description="Model for intent field extraction"
    )
    CHAT_MAX_TOKENS: int = Field(default=1024, description="Max tokens for assistant replies")
    EXTRACTION_MAX_TOKENS: int = Field(default=800, description="Max tokens for extraction calls")
    WEB_SEARCH_MAX_USES: int = Field(
        default=3, description="Max web searches per grounded assistant reply"
    )

    # Retry settings for transient LLM errors
    LLM_MAX_RETRIES: int = Field(default=2, description="Retries on transient API errors")
    LLM_RETRY_INITIAL_DELAY: float = Field(
        default=1.0, description="Initial backoff delay in seconds"
    )

    # User-facing clock
    USER_TIMEZONE: str = Field(
        default="America/Chicago", description="Time zone used for dates in prompts"
    )
    CHAT_HISTORY_LIMIT: int = Field(
        default=5, description="Recent conversation rows sent with each chat turn"
    )

    # Outbound email (Resend)
    RESEND_API_KEY: str | None = Field(default=None, description="Resend API key")
    RESEND_FROM_EMAIL: str = Field(
        default="assistant@kota-os.app", description="Sender address for outbound email"
    )
    RESEND_FROM_NAME: str = Field(default="KOTA OS", description="Sender display name")

    # Logging
    LOG_LEVEL: str | None = Field(
        default=None, description="Log level override (DEBUG, INFO, WARNING, ...)"
    )

    # Admin API key for internal tools
    ADMIN_API_KEY: str | None = Field(default=None, description="Admin API key")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
