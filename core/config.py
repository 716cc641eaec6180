"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
Settings are constructed by the process entry point and handed to
create_app(), so tests can build their own instance.
"""
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError

load_dotenv()


# Placeholder credential shipped in the sample .env; treated as "not configured".
PLACEHOLDER_SMTP_USER = "user@gmail.com"

REQUIRED_SETTINGS = ("JWT_SECRET", "OPENROUTER_API_KEY")
REQUIRED_IN_PRODUCTION = ("FRONTEND_URL",)


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=5000)
    NODE_ENV: str = Field(default="development")  # development | production | test
    FRONTEND_URL: Optional[str] = Field(default="http://localhost:5173")

    # JWT Authentication - REQUIRED for token signing
    JWT_SECRET: Optional[str] = Field(
        default=None,
        description="JWT signing key. Generate with: "
                    "python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
    JWT_EXPIRE_MINUTES: int = Field(default=7 * 24 * 60)

    # Email (SMTP). Empty credentials switch the mail notifier to mock mode.
    SMTP_HOST: str = Field(default="smtp.gmail.com")
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: Optional[str] = Field(default=None)
    SMTP_PASS: Optional[str] = Field(default=None)

    # LLM (OpenRouter, OpenAI-compatible API)
    OPENROUTER_API_KEY: Optional[str] = Field(default=None)
    OPENROUTER_MODEL: str = Field(default="openai/gpt-4o-mini")
    OPENROUTER_BASE_URL: str = Field(default="https://openrouter.ai/api/v1")

    # Stripe
    STRIPE_SECRET_KEY: Optional[str] = Field(default=None)
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(default=None)
    STRIPE_PRICE_ID: Optional[str] = Field(default=None)
    STRIPE_CHECKOUT_SUCCESS_URL: Optional[str] = Field(default=None)
    STRIPE_CHECKOUT_CANCEL_URL: Optional[str] = Field(default=None)

    # Request handling
    UPLOADS_DIR: str = Field(default="uploads")
    JSON_BODY_LIMIT_BYTES: int = Field(default=10 * 1024 * 1024)  # 10 MiB
    EXTERNAL_API_TIMEOUT: int = Field(default=30)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Sentry Error Tracking
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_TRACES_SAMPLE_RATE: float = Field(default=0.1)

    @property
    def is_development(self) -> bool:
        return self.NODE_ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"


def missing_settings(settings: Settings) -> List[str]:
    """Names of required settings that are unset or blank."""
    required = list(REQUIRED_SETTINGS)
    if settings.is_production:
        required.extend(REQUIRED_IN_PRODUCTION)
    return [name for name in required if not (getattr(settings, name, None) or "").strip()]


def validate_settings(settings: Settings) -> None:
    """
    Fail fast on missing or unsafe configuration.

    Raises ConfigurationError listing every problem found.
    """
    problems = []

    missing = missing_settings(settings)
    if missing:
        problems.append(f"missing required environment variables: {', '.join(missing)}")

    if settings.NODE_ENV not in ("development", "production", "test"):
        problems.append(f"NODE_ENV must be development, production or test (got {settings.NODE_ENV!r})")

    if settings.is_production and settings.JWT_SECRET and len(settings.JWT_SECRET) < 32:
        problems.append("JWT_SECRET must be at least 32 characters in production")

    if problems:
        raise ConfigurationError("; ".join(problems))


@lru_cache
def get_settings() -> Settings:
    return Settings()
