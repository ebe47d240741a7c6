"""
Application configuration.
"""

from pathlib import Path
from typing import Any, List, Optional

from pydantic import Field, PostgresDsn, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # Core Settings
    PROJECT_NAME: str = "Inventory API"
    PROJECT_DESCRIPTION: str = "Product and category inventory management API"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = "development_secret_key"

    # Auth Settings
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # API Settings
    API_PREFIX: str = "/api"
    CORS_ORIGINS_STR: str = "*"

    # Database Settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "inventory"
    POSTGRES_PORT: str = "5432"
    DATABASE_URI: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v

        data = info.data
        if not data:
            raise ValueError("Missing data for DATABASE_URI")

        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=data.get("POSTGRES_USER"),
                password=data.get("POSTGRES_PASSWORD"),
                host=data.get("POSTGRES_SERVER"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=f"{data.get('POSTGRES_DB') or ''}",
            )
        )

    # Media Settings
    MEDIA_ROOT: Path = Path("storage")
    MEDIA_URL: str = "/storage"
    IMAGE_MAX_SIZE_KB: int = 2048
    IMAGE_ALLOWED_EXTENSIONS_STR: str = "jpeg,png,jpg,gif"

    @property
    def IMAGE_ALLOWED_EXTENSIONS(self) -> List[str]:
        return [ext.strip().lower() for ext in self.IMAGE_ALLOWED_EXTENSIONS_STR.split(",") if ext.strip()]

    def ensure_media_dirs(self) -> None:
        """Create the media root if it does not exist yet."""
        self.MEDIA_ROOT.mkdir(parents=True, exist_ok=True)

    # Pagination Settings
    DEFAULT_PER_PAGE: int = 10
    MAX_PER_PAGE: int = 100

    # Sentry Settings
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Prometheus Metrics
    ENABLE_METRICS: bool = True

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True


# Development defaults above; override with environment variables or .env in deployments
settings = Settings()
