from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_url: str = Field(default="sqlite:///vitals.db", validation_alias="VITALS_DB_URL")
    log_level: str = Field(default="INFO", validation_alias="VITALS_LOG_LEVEL")
    host: str = "127.0.0.1"
    port: int = 8090
    ai_provider: str = Field(default="gemini", validation_alias="AI_PROVIDER")
    ai_timeout_seconds: float = Field(default=30.0, validation_alias="AI_TIMEOUT_SECONDS")
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias="GEMINI_BASE_URL",
    )
    gemini_model_fast: str = Field(default="gemini-3-flash-preview", validation_alias="GEMINI_MODEL_FAST")
    gemini_model_advanced: str = Field(default="gemini-3-pro-preview", validation_alias="GEMINI_MODEL_ADVANCED")
    ollama_url: str = Field(default="http://localhost:11434/api/generate", validation_alias="OLLAMA_URL")
    cron_secret: str = Field(default="", validation_alias="CRON_SECRET")
    default_alert_threshold: int = Field(default=60, validation_alias="VITALS_DEFAULT_ALERT_THRESHOLD")

    class Config:
        env_file = ".env"


settings = Settings()
