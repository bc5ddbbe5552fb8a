from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Contract Lifecycle Management"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:3002",
        "http://localhost:3003",
    ]

    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Generative text service (OpenAI-compatible chat completions)
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_MAX_TOKENS: int = 500
    OPENAI_MAX_TEXT_LENGTH: int = 15000
    OPENAI_TEMPERATURE: float = 0.3
    OPENAI_TIMEOUT_SECONDS: float = 300.0
    SUMMARY_BULLET_COUNT: int = 5

    # Identity provider and object storage
    FIREBASE_CREDENTIALS_PATH: str | None = None
    FIREBASE_PROJECT_ID: str | None = None
    FIREBASE_STORAGE_BUCKET: str | None = None
    SIGNED_URL_EXPIRY_SECONDS: int = 3600

    MAX_UPLOAD_SIZE_MB: int = 50
    DOWNLOAD_TIMEOUT_SECONDS: float = 60.0
    DOCUMENT_SUMMARY_LENGTH: int = 200

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> "Settings":
    return Settings()


settings = get_settings()
