from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/authdir"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    session_lifetime_minutes: int = 60
    # Fernet key (urlsafe base64, 32 bytes) for PII columns of the person directory
    pii_encryption_key: str = "ZGV2LXBpaS1rZXktY2hhbmdlLWluLXByb2R1Y3Rpb24="

    # Recovery workflow
    domestic_nationality_id: int = 31
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_upload_types: list[str] = ["application/pdf", "image/jpeg", "image/png"]

    # Notifications
    email_provider_url: str = "http://localhost:8025/api/send"
    email_provider_api_key: str | None = None
    email_sender: str = "no-reply@authdir.local"
    notification_timeout_seconds: float = 10.0

    # Blob storage
    storage_path: Path = Path("./storage")
    public_base_url: str = "http://localhost:8000"
    signed_url_expire_seconds: int = 600

    # App
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    app_name: str = "AuthDir"
    app_version: str = "0.1.0"

    # CORS: use JSON array in .env: CORS_ORIGINS=["http://localhost:5173"]
    cors_origins: list[str] = ["http://localhost:5173"]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
