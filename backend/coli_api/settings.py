from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
	openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
	# Text model for coach replies; short outputs keep latency low
	openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
	openai_max_output_tokens: int = Field(default=70, validation_alias="OPENAI_MAX_OUTPUT_TOKENS")
	openai_temperature: float = Field(default=0.4, validation_alias="OPENAI_TEMPERATURE")
	openai_timeout_seconds: float = Field(default=30, validation_alias="OPENAI_TIMEOUT_SECONDS")

	# Speech synthesis
	tts_model: str = Field(default="gpt-4o-mini-tts", validation_alias="OPENAI_TTS_MODEL")
	tts_voice: str = Field(default="shimmer", validation_alias="OPENAI_TTS_VOICE")
	tts_max_chars: int = Field(default=800, validation_alias="TTS_MAX_CHARS")

	# Warm-instance caches (entries, not bytes)
	coach_cache_max: int = Field(default=200, validation_alias="COACH_CACHE_MAX")
	tts_cache_max: int = Field(default=120, validation_alias="TTS_CACHE_MAX")

	# Answer matching and feedback policy
	answer_strip_punctuation: bool = Field(default=True, validation_alias="ANSWER_STRIP_PUNCTUATION")
	answer_detect_hedges: bool = Field(default=True, validation_alias="ANSWER_DETECT_HEDGES")
	feedback_max_chars: int = Field(default=220, validation_alias="FEEDBACK_MAX_CHARS")

	# CORS allow-list (JSON list in the environment)
	allowed_origins: List[str] = Field(
		default=["https://ottiya.com", "https://www.ottiya.com"],
		validation_alias="ALLOWED_ORIGINS",
	)

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
