from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BUSINESS_TIMEZONE: str = "Asia/Ho_Chi_Minh"
    BUSINESS_OPEN_HOUR: int = 9
    BUSINESS_CLOSE_HOUR: int = 17
    SLOT_STEP_MINUTES: int = 30

    STORE_PROVIDER: str = "memory"  # "memory" | "json"
    STORE_DATA_DIR: str = "./data/bookings"
    STORE_LOCK_TIMEOUT_SECONDS: float = 5.0

    CATALOG_BASE_URL: str | None = None
    CATALOG_API_KEY: str | None = None
    CATALOG_TIMEOUT_SECONDS: float = 5.0
    CATALOG_CACHE_TTL_SECONDS: float = 300.0

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100


settings = Settings()
