from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"
    DATABASE_URL: str = "sqlite:///./data/appointments.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    DEFAULT_TIMEZONE: str = "UTC"
    DEFAULT_DURATION_MINUTES: int = 30
    DEFAULT_BOOKING_WINDOW_DAYS: int = 30
    DEFAULT_MIN_NOTICE_MINUTES: int = 120
    MAX_BOOKING_WINDOW_DAYS: int = 365

    AVAILABILITY_WINDOW_CAP_DAYS: int = 30
    SUMMARY_DAYS_DEFAULT: int = 14
    SUMMARY_DAYS_CAP: int = 60

    NOTIFICATIONS_ENABLED: bool = True
    NOTIFICATION_WEBHOOK_URL: str | None = None
    NOTIFICATION_WEBHOOK_SECRET: str | None = None


settings = Settings()
