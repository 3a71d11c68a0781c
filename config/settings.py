from __future__ import annotations

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Core
    ENVIRONMENT: str = Field(default="production")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=5000)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ALLOW_ORIGINS: str = Field(default="*")  # comma-separated

    # Telephony provider (Twilio). Access key id is the account SID.
    PROVIDER_ACCESS_KEY_ID: str = Field(default="")
    PROVIDER_ACCESS_KEY_SECRET: str = Field(default="")
    PROVIDER_EDGE: str = Field(default="")
    PROVIDER_REGION: str = Field(default="")
    PROVIDER_NUMBER: str = Field(default="")  # default sender / caller id

    # Map dispatch failures to 400/502/503 instead of a blanket 500
    STRICT_ERROR_STATUS: bool = Field(default=False)

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in (self.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]


settings = Settings()


def get_settings() -> Settings:
    return settings
