# transport_admin/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./transport_admin.db"
    DATABASE_TEST_URL: Optional[str] = None

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and ("localhost" in v or v.startswith("sqlite")):
            raise ValueError("🚨 Production environment cannot use a local database!")
        return v

    # === Public URLs ===
    API_BASE_URL: str = "http://localhost:9106"
    PUBLIC_APP_URL: str = "http://localhost:3000"

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === Blob storage ===
    STORAGE_ROOT: str = "storage"
    STORAGE_PUBLIC_URL: str = "http://localhost:9106/storage"
    VEHICLE_DOCUMENTS_BUCKET: str = "VEHICLE_DOCUMENTS"

    # === Pre-check media ===
    PREVIEW_DIR: str = "previews"
    PREVIEW_PUBLIC_URL: str = "/previews"
    CAPTURE_SPOOL_DIR: Optional[str] = None
    CAPTURE_ENABLED: bool = True
    MAX_VIDEO_SIZE: int = 200 * 1024 * 1024
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024
    IMAGE_MAX_DIMENSION: int = 1920

    # === Start-session workflows ===
    WORKFLOW_TTL_MINUTES: int = 120

    # === Audit ===
    AUDIT_ENABLED: bool = True

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    TIMEZONE: str = "Europe/London"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
