# shared/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings, read from the environment or a local .env file.
    """
    # --- Base ---
    PROJECT_NAME: str = "School File Portal"
    API_PREFIX: str = ""

    # --- Database ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./school_files.db"
    DB_ECHO: bool = False

    # --- Security ---
    SECRET_KEY: str = "your-secret-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Storage ---
    STORAGE_ROOT: str = "wwwroot"
    MAX_UPLOAD_SIZE: int = 100 * 1024 * 1024

    # --- Bootstrap ---
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_CLASSES: List[str] = ["VI", "VII", "VIII", "IX", "X", "XI", "XII"]

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = Settings()
