from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-haiku-4-5-20251001"
    ANTHROPIC_FALLBACK_MODELS: List[str] = [
        "claude-3-5-haiku-latest",
        "claude-3-haiku-20240307",
    ]
    ANTHROPIC_TIMEOUT_SECONDS: float = 60.0
    ANTHROPIC_MAX_RETRIES: int = 2
    PLAN_TEMPERATURE: float = 0.6
    PLAN_MAX_TOKENS: int = 1200

    WEATHER_API_KEY: Optional[str] = None
    WEATHER_API_BASE: str = "https://api.weatherapi.com/v1"
    WEATHER_FORECAST_DAYS: int = 7
    WEATHER_TIMEOUT_SECONDS: float = 15.0
    WEATHER_RETRIES: int = 2

    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "farmhand"
    MONGODB_TLS: bool = True

    LOG_LEVEL: str = "INFO"
    WALKTHROUGH_ADVANCE_DELAY: float = 0.35  # seconds before auto-advancing a checked task

    class Config:
        env_file = ".env"

settings = Settings()
