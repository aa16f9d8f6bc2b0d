from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Keep responses concise and friendly, under 100 words."
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str = Field("https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
    openai_model: str = Field("gpt-3.5-turbo", validation_alias="OPENAI_MODEL")
    openai_system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, validation_alias="OPENAI_SYSTEM_PROMPT")
    openai_max_tokens: int = Field(150, validation_alias="OPENAI_MAX_TOKENS")
    openai_temperature: float = Field(0.7, validation_alias="OPENAI_TEMPERATURE")
    openai_timeout: float = Field(30.0, validation_alias="OPENAI_TIMEOUT")

    did_api_key: Optional[str] = Field(default=None, validation_alias="DID_API_KEY")
    did_base_url: str = Field("https://api.d-id.com", validation_alias="DID_BASE_URL")
    did_presenter_id: str = Field("lily-ldwi8a_LdG", validation_alias="DID_PRESENTER_ID")
    did_voice_provider: str = Field("microsoft", validation_alias="DID_VOICE_PROVIDER")
    did_voice_id: str = Field("Sara", validation_alias="DID_VOICE_ID")
    did_result_format: str = Field("mp4", validation_alias="DID_RESULT_FORMAT")
    did_submit_timeout: float = Field(15.0, validation_alias="DID_SUBMIT_TIMEOUT")
    did_status_timeout: float = Field(5.0, validation_alias="DID_STATUS_TIMEOUT")

    video_poll_interval: float = Field(3.0, validation_alias="VIDEO_POLL_INTERVAL")
    video_max_attempts: int = Field(30, validation_alias="VIDEO_MAX_ATTEMPTS")
    video_text_limit: int = Field(500, validation_alias="VIDEO_TEXT_LIMIT")

    app_host: str = Field("0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(5000, validation_alias=AliasChoices("PORT", "APP_PORT"))
    cors_origins: str = Field("*", validation_alias="CORS_ORIGINS")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    @field_validator("openai_api_key", "did_api_key", mode="before")
    @classmethod
    def blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("openai_base_url", "did_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return (value or "").rstrip("/")

    @field_validator("video_max_attempts", "video_text_limit")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def has_openai(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def has_did(self) -> bool:
        return bool(self.did_api_key)


@lru_cache()
def get_settings() -> Settings:
    try:
        return Settings()
    except Exception as exc:
        raise RuntimeError("Failed to load application settings. Ensure your .env file is configured.") from exc


settings = get_settings()
