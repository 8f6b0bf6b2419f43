"""Configuration management for Funding Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
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

    # AI providers
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")
    ANTHROPIC_API_KEY: str | None = Field(default=None, description="Anthropic API key (fallback provider)")

    # Environment
    FUNDING_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Model selection
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="Default OpenAI chat model")
    DOCUMENT_ANALYSIS_MODEL: str = Field(default="gpt-4o", description="Model for document analysis")
    FORM_COMPLETION_MODEL: str = Field(default="gpt-4o", description="Model for smart form completion")
    FALLBACK_OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="OpenAI model used on failover")
    FALLBACK_ANTHROPIC_MODEL: str = Field(
        default="claude-3-haiku-20240307", description="Anthropic model used on failover"
    )
    AI_MAX_TOKENS: int = Field(default=4000, description="Max completion tokens for AI proxy calls")

    # SendGrid notifications
    SENDGRID_API_KEY: str | None = Field(default=None, description="SendGrid API key")
    SENDGRID_FROM_EMAIL: str = Field(default="noreply@wali-os.com", description="Sender address")
    SENDGRID_FROM_NAME: str = Field(
        default="WALI-OS Unified Funding Agent", description="Sender display name"
    )
    DEFAULT_NOTIFICATION_EMAIL: str = Field(
        default="admin@organization.com", description="Recipient when tenant has none configured"
    )
    APP_URL: str = Field(default="http://localhost:3000", description="Public app URL for email links")
    NOTIFICATION_MAX_ATTEMPTS: int = Field(default=3, description="Send attempts before marking failed")
    NOTIFICATION_BATCH_SIZE: int = Field(default=50, description="Notifications processed per run")

    # Knowledge scraping
    ENABLE_SBA_INTELLIGENCE: bool = Field(default=False, description="Blend SBA programs into UFA analysis")
    USE_HEADLESS_BROWSER: bool = Field(default=True, description="Scrape with Playwright before httpx")
    SCRAPE_TIMEOUT_SECONDS: int = Field(default=30, description="Per-page scrape timeout")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
