# workforce/config/settings.py
# Runtime configuration, read from the environment (and .env when present)

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Only ever used outside production, see Settings.check_secrets()
_DEV_ACCESS_SECRET = "dev-access-secret-change-me"
_DEV_REFRESH_SECRET = "dev-refresh-secret-change-me"


class Settings(BaseSettings):
    """Application settings

    Every value can be overridden by keyword, which is how the tests build
    isolated applications without touching the process environment. A value
    that does not parse fails with an error naming the variable.
    """

    environment: str = "development"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./workforce.db"
    database_echo: bool = False

    # Tokens
    jwt_secret: str = ""
    jwt_refresh_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=24 * 60, ge=1)
    refresh_token_expire_days: int = Field(default=30, ge=1)

    # Passwords
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # HTTP; origins are comma separated
    cors_origins: str = "http://localhost:3000"
    rate_limit_enabled: bool = True
    api_rate_limit: str = "100/15 minutes"
    auth_rate_limit: str = "5/15 minutes"

    # Maintenance jobs
    scheduler_enabled: bool = True
    notification_retention_days: int = Field(default=30, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def check_secrets(self) -> "Settings":
        """Refuse settings that would make the service unsafe"""
        if not self.is_production:
            self.jwt_secret = self.jwt_secret or _DEV_ACCESS_SECRET
            self.jwt_refresh_secret = self.jwt_refresh_secret or _DEV_REFRESH_SECRET

        missing = []
        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        if not self.jwt_refresh_secret:
            missing.append("JWT_REFRESH_SECRET")
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")
        if self.jwt_secret == self.jwt_refresh_secret and self.is_production:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must differ")
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
