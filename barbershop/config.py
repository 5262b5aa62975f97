# barbershop/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./barbershop.db"

    SECRET_KEY: str = "change-me-later"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    SHOP_TIMEZONE: str = "America/New_York"
    LOG_LEVEL: str = "INFO"

    SEED_CATALOG: bool = True
    ADMIN_PHONE: str | None = None
    ADMIN_PASSWORD: str | None = None
    ADMIN_NAME: str = "Admin"

    MAX_NOTES_LENGTH: int = 500
    MAX_SERVICES_PER_BOOKING: int = 5


settings = Settings()
