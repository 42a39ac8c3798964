from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str

    # API
    API_TITLE: str = "PesXChange API"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 30
    CORS_ORIGINS: List[str] = ["*"]

    # Identity provider (PESU Academy credential verifier)
    PESU_AUTH_URL: str = "https://pesu-auth.onrender.com/authenticate"
    OUTBOUND_TIMEOUT_SECONDS: float = 30.0

    # Messaging
    MESSAGE_MAX_LENGTH: int = 1000
    MESSAGE_FETCH_LIMIT: int = 100
    MESSAGE_CACHE_TTL_SECONDS: float = 120.0
    MESSAGE_CACHE_MAX_ENTRIES: int = 50

    # Rate limits (requests per window)
    API_RATE_LIMIT: int = 100
    API_RATE_WINDOW_SECONDS: int = 3600
    PROFILE_UPDATE_RATE_LIMIT: int = 10
    PROFILE_UPDATE_RATE_WINDOW_SECONDS: int = 60
    PROFILE_STATS_RATE_LIMIT: int = 30
    PROFILE_STATS_RATE_WINDOW_SECONDS: int = 120
    AUTH_RATE_LIMIT: int = 5
    AUTH_RATE_WINDOW_SECONDS: int = 900
    RATE_LIMIT_MAX_ENTRIES: int = 10000

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
