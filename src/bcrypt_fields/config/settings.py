"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BcryptRounds = Annotated[int, Field(ge=4, le=31)]


class Settings(BaseSettings):
    """Environment-driven settings for the hashing capability and logging."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    bcrypt_default_rounds: BcryptRounds = Field(
        default=12,
        validation_alias="BCRYPT_DEFAULT_ROUNDS",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    bcrypt_fields_log_level: str | None = Field(
        default=None,
        validation_alias="BCRYPT_FIELDS_LOG_LEVEL",
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()
