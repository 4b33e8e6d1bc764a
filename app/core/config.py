from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Balance API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Pairwise balance tracking for chat groups"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "balance"

    # Chat platforms
    PLATFORMS: List[str] = ["telegram"]
    DEFAULT_PLATFORM: str = "telegram"

    # Presentation
    CURRENCY_SYMBOL: str = "$"

    # User lookup cache
    USER_CACHE_TTL_SECONDS: int = 1800

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
