# mycare/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    database_url: str = Field(..., validation_alias="DATABASE_URL")

    # Which upstream produces the next question / final assessment
    agent_backend: Literal["llm", "webhook"] = Field("llm", validation_alias="AGENT_BACKEND")
    agent_webhook_url: str | None = Field(None, validation_alias="AGENT_WEBHOOK_URL")
    agent_timeout_seconds: float = Field(60.0, validation_alias="AGENT_TIMEOUT_SECONDS")

    openai_api_key: str | None = Field(None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str | None = Field(None, validation_alias="OPENAI_BASE_URL")
    llm_model: str = Field("gemini-1.5-pro", validation_alias="LLM_MODEL")
    llm_temperature: float = Field(0.7, validation_alias="LLM_TEMPERATURE")

    record_answers: bool = Field(True, validation_alias="RECORD_ANSWERS")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    cors_origins: str = Field("*", validation_alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
