# classhub/core/config.py
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Classroom Collaboration Service"
    API_PREFIX: str = "/api"

    # Database
    # SQLite by default; PostgreSQL works via postgresql+psycopg2://...
    DATABASE_URL: str = "sqlite:///./classroom.db"

    # JWT Authentication
    SECRET_KEY: str = "changeme123"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Uploads
    UPLOAD_DIR: str = "public/uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_VIDEO_MB: int = 200
    MAX_FILE_MB: int = 20

    # Transcoding
    FFMPEG_BINARY: str = "ffmpeg"
    TRANSCODE_MAX_HEIGHT: int = 720

    # Mail
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_EMAIL: str | None = None
    SMTP_PASS: str | None = None

    # Generative text service
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-pro"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    GEMINI_TIMEOUT_SECONDS: float = 30.0

    # Redis (notification queue)
    REDIS_URL: str = "redis://localhost:6379/0"
    NOTIFY_ON_UPLOAD: bool = False

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
