"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Document store
    store_backend: Literal["cosmos", "memory"] = Field(
        default="memory", description="Document store backend (memory for local development)"
    )
    cosmos_endpoint: str = Field(default="", description="Cosmos DB endpoint for accounts")
    cosmos_key: str = Field(default="", description="Cosmos DB key for accounts")
    cosmos_database: str = Field(default="users", description="Accounts database id")
    cosmos_container: str = Field(default="accounts", description="Accounts container id")
    qr_cosmos_endpoint: str = Field(
        default="", description="Cosmos DB endpoint for QR projects (defaults to accounts endpoint)"
    )
    qr_cosmos_key: str = Field(
        default="", description="Cosmos DB key for QR projects (defaults to accounts key)"
    )
    qr_cosmos_database: str = Field(default="qrcodes", description="QR projects database id")
    qr_cosmos_container: str = Field(default="projects", description="QR projects container id")
    custom_store_allowed_suffix: str = Field(
        default=".documents.azure.com",
        description="Host suffix required for caller-supplied store endpoints",
    )

    # Auth
    session_secret: str = Field(default="", description="Secret key for JWT signing")
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_expiration_days: int = Field(default=7, description="JWT token expiration in days")
    code_expiration_minutes: int = Field(
        default=10, description="One-time code expiration in minutes"
    )
    bcrypt_rounds: int = Field(default=10, ge=4, le=31, description="bcrypt cost factor")

    # Scan tracking
    scan_event_capacity: int = Field(default=100, ge=1, description="Scan events kept per project")
    geolocation_url: str = Field(
        default="http://ip-api.com/json/{ip}?fields=status,city,regionName,country,lat,lon",
        description="Reverse geolocation URL template",
    )
    geolocation_timeout: float = Field(default=2.0, description="Geolocation timeout in seconds")
    public_base_url: str = Field(
        default="http://localhost:3001", description="Public URL used in rendered QR codes"
    )

    # Image captioning
    huggingface_api_key: str = Field(default="", description="Hugging Face inference API key")
    caption_model: str = Field(
        default="Salesforce/blip-image-captioning-large", description="Captioning model id"
    )
    caption_api_url: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="Inference API base URL",
    )
    caption_timeout: float = Field(default=30.0, description="Captioning timeout in seconds")

    # App
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    debug: bool | None = Field(default=None, description="Debug mode (defaults based on environment)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    port: int = Field(default=3001, description="Port to listen on")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Email
    email_backend: Literal["console", "smtp", "resend"] = Field(
        default="console", description="Email backend (console for dev, smtp or resend for prod)"
    )
    email_from: str = Field(
        default="QR Track <noreply@qrtrack.app>", description="From address for emails"
    )

    # SMTP settings (when email_backend=smtp)
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_username: str = Field(default="", description="SMTP username")
    smtp_password: str = Field(default="", description="SMTP password")
    smtp_use_tls: bool = Field(default=True, description="Use TLS for SMTP")

    # Resend settings (when email_backend=resend)
    resend_api_key: str = Field(default="", description="Resend API key")

    # Sentry
    sentry_dsn: str = Field(default="", description="Sentry DSN for error tracking")

    @model_validator(mode="after")
    def _check_production_secrets(self) -> "Settings":
        if self.environment == "production":
            if len(self.session_secret) < MIN_SECRET_LENGTH:
                raise ValueError(
                    f"SESSION_SECRET must be at least {MIN_SECRET_LENGTH} characters in production"
                )
            if self.store_backend == "memory":
                raise ValueError("STORE_BACKEND=memory is not allowed in production")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "development"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def debug_enabled(self) -> bool:
        """Get debug mode, defaulting based on environment if not explicitly set."""
        if self.debug is not None:
            return self.debug
        return self.is_development


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
