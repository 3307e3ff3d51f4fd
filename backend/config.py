# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Literal
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./civiccare.db"
    FRONTEND_URL: str = "http://localhost:5173"

    # Uploaded complaint photos, served under /public/uploads
    UPLOAD_DIR: str = "public/uploads"
    MAX_IMAGES_PER_REQUEST: int = 5

    # Hive image screening
    HIVE_API_URL: str = "https://api.thehive.ai/api/v2/task/sync"
    HIVE_API_KEY: str = ""
    HIVE_TIMEOUT_SECONDS: float = 30.0
    AI_GENERATED_THRESHOLD: float = 0.75
    IMAGE_SIMILARITY_THRESHOLD: float = 0.7
    SCREENING_ON_ERROR: Literal["fail-open", "fail-closed"] = "fail-open"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
