from __future__ import annotations

from typing import List

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rebroadcast.core.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Rebroadcast admission gate"
    ENV: str = Field(default="dev", description="dev|prod")
    LOG_LEVEL: str = Field(default="info", description="debug|info|warning|error|critical")

    # API
    HOST: str = "127.0.0.1"
    PORT: int = 8080
    MAX_BODY_BYTES: int = 256_000

    # Security
    INTERNAL_API_KEY: str = Field(default="", description="Required for /admin endpoints")
    WEBHOOK_VERIFY_SIGNATURE: bool = Field(default=False)
    WEBHOOK_SECRET: str = Field(default="", description="Consumer secret used for CRC and signatures")

    # Collaborators (live API vs fixtures)
    COLLABORATORS_PROVIDER: str = Field(default="rebroadcast.plugins.twitter_live:provide_collaborators")
    TWITTER_API_BASE: str = Field(default="https://api.twitter.com/1.1")
    TWITTER_BEARER_TOKEN: str = Field(default="")
    TWITTER_TIMEOUT_SEC: int = Field(default=15)
    TWITTER_RETRIES: int = Field(default=2)
    LOAD_MUTES_ON_STARTUP: bool = Field(default=True)

    # Admission tunables
    MUST_FOLLOW: str = Field(default="", description="Authors must follow this handle (empty = off)")
    IGNORE_FROM: str = Field(default="", description="Never rebroadcast this handle")
    MUTUAL_FOLLOW: bool = Field(default=False)
    POST_TIME_DELTA_SECONDS: int = Field(default=0)
    CONTENT_TIME_DELTA_SECONDS: int = Field(default=0)
    DELTA_GATED_CONTENT: List[str] = Field(default_factory=list)
    DENY_SENSITIVE_CONTENT: bool = Field(default=False)
    MIN_ACCOUNT_AGE_DAYS: int = Field(default=0)
    PROHIBITED_MENTIONS: List[str] = Field(default_factory=list)
    PROHIBITED_WORDS: List[str] = Field(default_factory=list)
    TEST_MODE: bool = Field(default=False, description="Log admitted posts instead of rebroadcasting")

    # Cache capacities
    FOLLOW_CACHE_SIZE: int = 128
    POST_DELTA_CACHE_SIZE: int = 128
    CONTENT_DELTA_CACHE_SIZE: int = 27
    POST_TEXT_CACHE_SIZE: int = 25
    URL_CACHE_SIZE: int = 10
    VERDICT_LOG_SIZE: int = 500

    @field_validator(
        "FOLLOW_CACHE_SIZE",
        "POST_DELTA_CACHE_SIZE",
        "CONTENT_DELTA_CACHE_SIZE",
        "POST_TEXT_CACHE_SIZE",
        "URL_CACHE_SIZE",
        "VERDICT_LOG_SIZE",
    )
    @classmethod
    def _positive_capacity(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache capacity must be >= 1")
        return v


def load_settings(**overrides) -> Settings:
    """
    Construye Settings una sola vez al arrancar.
    Cualquier error de validación es fatal (ConfigError).
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
