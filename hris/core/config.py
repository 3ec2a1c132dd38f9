from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "postgresql+asyncpg://hris:hris_secret@db:5432/hris"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Annual quota per leave type, in days. Override with a JSON object in env.
    LEAVE_ENTITLEMENTS: dict[str, int] = {
        "annual": 12,
        "sick": 12,
        "emergency": 3,
        "maternity": 90,
        "paternity": 7,
        "other": 0,
    }

    DEFAULT_ATTENDANCE_LIMIT: int = 30

    RUN_MIGRATIONS_ON_STARTUP: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]


settings = Settings()
