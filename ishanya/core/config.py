# ================================
# file: ishanya/core/config.py
# ================================
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Default DB: override with the DB_URL env var or a .env file
    DB_URL: str = "sqlite:///./ishanya.db"

    SESSION_SECRET: str = "change-me-please"
    LOG_LEVEL: str = "INFO"

    # Object storage (local filesystem bucket)
    STORAGE_DIR: str = "storage"
    STORAGE_BUCKET: str = "ishanya"
    SIGNED_URL_SECRET: str = "signed-url-dev"
    SIGNED_URL_TTL: int = 60

    # External intake spreadsheet (stubbed)
    PENDING_SHEET_ID: str = "pending-reviews"
    PENDING_SHEET_RANGE: str = "Sheet1!A1:J1000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

# App-wide singleton
settings = Settings()
