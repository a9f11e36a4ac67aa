from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Store connection string (sqlite+aiosqlite:/// or postgresql+asyncpg://)
    DATABASE_URL: str = "sqlite+aiosqlite:///./submissions.db"

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    PORT: int = 5000
    CORS_ORIGIN: str = "http://localhost:3000"
    ENV: str = "dev"  # "dev" or "prod"

    # --- ATTACHMENTS ---
    UPLOAD_DIR: str = "uploads"
    UPLOADS_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB Cap

    # gstNo: optional-if-empty unless this is set
    GST_REQUIRED: bool = False

    # --- RATE LIMITING ---
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    FORM_RATE_LIMIT: str = "10/minute"

    # Used by the Python form client
    API_BASE_URL: str = "http://localhost:5000"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
