from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List

class Settings(BaseSettings):
    # Basic settings
    PROJECT_NAME: str = "Mini Social API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite:///./minisocial.db"

    # Security
    SECRET_KEY: str = "change-me-in-prod"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_HASH_ROUNDS: int = 12

    # Feed and search
    FEED_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    SEARCH_RESULT_LIMIT: int = 20

    # Background jobs
    CELERY_BROKER_URL: str = "pyamqp://guest@localhost//"

    class Config:
        case_sensitive = True
        env_file = ".env"

@lru_cache()
def get_settings() -> Settings:
    return Settings()
