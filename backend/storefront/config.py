from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    RESET_DB: bool = False

    # mock upstream catalogue
    CATALOGUE_SEED_FILE: Optional[str] = None
    CATALOGUE_MOCK_DELAY_MS: int = 200
    CATALOGUE_FAILURE_RATE: float = 0.0

    # storefront behaviour
    REFRESH_INTERVAL_SECONDS: int = 300
    DEFAULT_PRICE_MIN: float = 0.0
    DEFAULT_PRICE_MAX: float = 100.0

    # admin flag
    ADMIN_USER: str = "admin@skinseoul.com"
    ADMIN_PASSWORD: str = "change-this-password"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
