from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "RentEasy API"
    ENV: str = "development"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # -------------------------------------------------
    # MongoDB
    # -------------------------------------------------
    DATABASE_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "renteasy"

    # -------------------------------------------------
    # Auth tokens
    # -------------------------------------------------
    JWT_SECRET: str = "devsecret"
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24 * 30

    # -------------------------------------------------
    # Property image uploads
    # -------------------------------------------------
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_FILES: int = 5
    MAX_UPLOAD_BYTES: int = 5_000_000

    model_config = SettingsConfigDict(case_sensitive=True)


settings = Settings()
