from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBUG: bool = False
    APP_NAME: str = "paytrack"
    APP_VERSION: str = "1.0.0"
    APP_DATABASE_DSN: str = "sqlite:////tmp/paytrack.db"
    REDIS_URL: str = "redis://localhost:6379"
    LOG_LEVEL: str = "INFO"

    # Session tokens
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Spreadsheet uploads
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Run the overdue sweep inline before every customer search
    INLINE_OVERDUE_SWEEP: bool = True


settings = Settings()
