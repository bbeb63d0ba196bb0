from __future__ import annotations
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from datetime import timedelta
from typing import Optional

# Development-only fallback. Never valid outside ENV=dev.
INSECURE_DEV_SECRET = "fallback-secret-key-for-development"


class Settings(BaseSettings):
    # Environment
    ENV: str = Field(default="dev")
    APP_NAME: str = Field(default="Auth App")
    LOG_LEVEL: str = Field(default="INFO")

    # Security
    AUTH_SECRET_KEY: str = Field(
        default=INSECURE_DEV_SECRET,
        validation_alias=AliasChoices("AUTH_SECRET_KEY", "NEXTAUTH_SECRET", "JWT_SECRET"),
    )
    AUTH_ALGORITHM: str = Field(default="HS256")
    AUTH_SESSION_EXPIRE_DAYS: int = Field(default=30)
    AUTH_OTP_EXP_MINUTES: int = Field(default=10)
    AUTH_PASSWORD_MIN_LENGTH: int = Field(default=6)

    # Optional JWT metadata
    AUTH_ISSUER: Optional[str] = Field(default=None)

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./auth.db")

    # SMTP
    SMTP_HOST: str = Field(default="smtp.gmail.com")
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: str = Field(default="")
    SMTP_PASSWORD: str = Field(default="")
    SMTP_FROM: Optional[str] = Field(default=None)
    SMTP_FROM_NAME: str = Field(default="Auth App")

    # Background email delivery
    EMAIL_MAX_ATTEMPTS: int = Field(default=3)
    EMAIL_RETRY_BASE_DELAY: float = Field(default=1.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def session_expire_delta(self) -> timedelta:
        return timedelta(days=int(self.AUTH_SESSION_EXPIRE_DAYS))

    @property
    def otp_expire_delta(self) -> timedelta:
        return timedelta(minutes=int(self.AUTH_OTP_EXP_MINUTES))

    @property
    def is_dev(self) -> bool:
        return self.ENV.lower() == "dev"

    @property
    def is_stage(self) -> bool:
        return self.ENV.lower() == "stage"

    @property
    def is_prod(self) -> bool:
        return self.ENV.lower() == "prod"

    @property
    def uses_insecure_secret(self) -> bool:
        return not self.AUTH_SECRET_KEY or self.AUTH_SECRET_KEY == INSECURE_DEV_SECRET

    def validate_for_runtime(self) -> None:
        """Perform basic security checks based on the current environment.

        In non-dev environments this raises if the signing secret is missing,
        left at the development fallback, or too short to be trusted. Startup
        is expected to abort on the error.
        """
        if self.is_dev:
            return

        if self.uses_insecure_secret or len(self.AUTH_SECRET_KEY) < 32:
            raise RuntimeError(
                "AUTH_SECRET_KEY is not set to a strong value. "
                "Set a long, random secret in your environment for non-dev deployments."
            )


def get_settings() -> Settings:
    return Settings()
