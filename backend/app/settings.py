from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Groq serves both chat completions and Whisper transcription
	groq_api_key: str | None = Field(default=None, validation_alias="GROQ_API_KEY")
	groq_base_url: str = Field(default="https://api.groq.com/openai/v1", validation_alias="GROQ_BASE_URL")
	groq_chat_model: str = Field(default="openai/gpt-oss-120b", validation_alias="GROQ_CHAT_MODEL")
	groq_transcription_model: str = Field(default="whisper-large-v3-turbo", validation_alias="GROQ_TRANSCRIPTION_MODEL")

	# Inworld text-to-speech
	inworld_api_key: str | None = Field(default=None, validation_alias="INWORLD_API_KEY")
	inworld_base_url: str = Field(default="https://api.inworld.ai/tts/v1", validation_alias="INWORLD_BASE_URL")
	inworld_model: str = Field(default="inworld-tts-1-max", validation_alias="INWORLD_MODEL")
	# Rafael is a Spanish voice
	inworld_voice_id: str = Field(default="Rafael", validation_alias="INWORLD_VOICE_ID")

	# Outbound calls are single-attempt, bounded by this timeout
	provider_timeout_seconds: float = Field(default=60.0, validation_alias="PROVIDER_TIMEOUT_SECONDS")

	# Database (sessions are disabled when unset)
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Server
	host: str = Field(default="0.0.0.0", validation_alias="HOST")
	port: int = Field(default=3000, validation_alias="PORT")
	cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def cors_origin_list(self) -> list[str]:
		return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
