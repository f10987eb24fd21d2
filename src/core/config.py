"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-access-secret-change-me"
DEV_JWT_REFRESH_SECRET = "dev-refresh-secret-change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # "production" turns on the Secure flag for the refresh cookie
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    # Token pair - access and refresh tokens are signed with distinct secrets
    jwt_secret: str = Field(default=DEV_JWT_SECRET, validation_alias="JWT_SECRET")
    jwt_refresh_secret: str = Field(
        default=DEV_JWT_REFRESH_SECRET, validation_alias="JWT_REFRESH_SECRET",
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=15, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    refresh_token_expire_days: int = Field(
        default=7, validation_alias="REFRESH_TOKEN_EXPIRE_DAYS",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:5174",
        validation_alias="CORS_ORIGINS",
    )

    # In-process caches
    category_cache_ttl_seconds: float = Field(
        default=600, validation_alias="CATEGORY_CACHE_TTL_SECONDS",
    )
    summary_cache_ttl_seconds: float = Field(
        default=120, validation_alias="SUMMARY_CACHE_TTL_SECONDS",
    )

    # Groq (OpenAI-compatible chat completions API)
    groq_api_key: str = Field(default="", validation_alias="GROQ_API_KEY")
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1", validation_alias="GROQ_BASE_URL",
    )
    groq_text_model: str = Field(
        default="llama-3.3-70b-versatile", validation_alias="GROQ_TEXT_MODEL",
    )
    groq_vision_model: str = Field(
        default="meta-llama/llama-4-scout-17b-16e-instruct",
        validation_alias="GROQ_VISION_MODEL",
    )
    llm_timeout_seconds: float = Field(default=30.0, validation_alias="LLM_TIMEOUT_SECONDS")

    # Receipt uploads
    max_receipt_bytes: int = Field(
        default=5 * 1024 * 1024, validation_alias="MAX_RECEIPT_BYTES",
    )

    @model_validator(mode="after")
    def validate_production_secrets(self) -> "Settings":
        """
        Refuse to start in production with development or shared JWT secrets.

        The refresh secret must differ from the access secret, otherwise an access
        token would verify as a refresh token.
        """
        if not self.is_production:
            return self

        if self.jwt_secret in (DEV_JWT_SECRET, DEV_JWT_REFRESH_SECRET) or (
            self.jwt_refresh_secret in (DEV_JWT_SECRET, DEV_JWT_REFRESH_SECRET)
        ):
            raise ValueError(
                "JWT_SECRET and JWT_REFRESH_SECRET must be set in production.",
            )
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError(
                "JWT_SECRET and JWT_REFRESH_SECRET must be different values.",
            )
        return self

    @property
    def is_production(self) -> bool:
        """True when running with ENVIRONMENT=production."""
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def refresh_token_max_age(self) -> int:
        """Refresh token lifetime in seconds (also the cookie max-age)."""
        return self.refresh_token_expire_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
