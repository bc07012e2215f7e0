from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"
    debug_routes_enabled: bool = False

    # Infra
    database_url: str = "postgresql://kinote:kinote@db:5432/kinote"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    smtp_base_url: str = "http://smtp-mock:8025"
    frontend_url: str = "http://localhost:3000"

    # Security / policies
    bcrypt_rounds: int = 10
    jwt_secret: str = "dev-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_ttl_seconds: int = 7 * 24 * 3600

    # Pending registrations
    registration_ttl_seconds: int = 600
    code_ttl_seconds: int = 600
    password_reset_ttl_seconds: int = 3600
    cleanup_interval_seconds: float = 60.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
