from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/affiliate_coupons.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Query cache
    CACHE_BACKEND: str = "memory"  # "memory" or "redis"
    QUERY_CACHE_TTL: int = 3600

    # Coupons
    COUPONS_TABLE_NAME: str = "affiliate_wp_coupons"
    DEFAULT_PAGE_SIZE: int = 20

    # Base URL of the host admin screens, used for integration edit links
    ADMIN_URL: str = "http://example.com/wp-admin/"

    @property
    def redis_cache_enabled(self) -> bool:
        return self.CACHE_BACKEND == "redis"


settings = Settings()
