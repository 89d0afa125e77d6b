"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAIN_GROUP_ID = "4d627244-5598-4403-8704-979140ae9cac"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Snapshot
    data_dir: str = Field(
        default="./data",
        description="Directory holding the relational snapshot JSON files",
    )
    main_group_id: str = Field(
        default=DEFAULT_MAIN_GROUP_ID,
        description="Viewpoint group id the dashboard is computed for",
    )

    @field_validator("main_group_id")
    @classmethod
    def validate_main_group_id(cls, v: str) -> str:
        if not v.strip():
            msg = "main_group_id must not be blank"
            raise ValueError(msg)
        return v.strip()

    # Sway API enhancements
    sway_api_key: str | None = Field(
        default=None,
        description="Sway API key exchanged for a JWT (enhancements disabled when unset)",
    )
    sway_graphql_endpoint: str = Field(
        default="https://sway-production.hasura.app/v1/graphql",
        description="Sway GraphQL endpoint",
    )
    sway_auth_endpoint: str = Field(
        default="https://www.sway.co/api/auth/token",
        description="Endpoint exchanging the API key for a JWT",
    )

    @field_validator("sway_graphql_endpoint", "sway_auth_endpoint")
    @classmethod
    def validate_https_endpoint(cls, v: str) -> str:
        if not v.startswith("https://"):
            msg = "Sway endpoints must use HTTPS"
            raise ValueError(msg)
        return v

    sway_request_timeout: float = Field(
        default=30.0,
        description="Sway API request timeout in seconds",
        gt=0,
    )
    sway_token_ttl_hours: int = Field(
        default=60,
        description="Token lifetime used when the JWT carries no exp claim",
        gt=0,
    )
    api_enhancements_enabled: bool = Field(
        default=True,
        description="Fetch optional enrichment data from the Sway API",
    )
    top_leaders_limit: int = Field(
        default=50,
        description="Number of peer leaders fetched for comparison",
        ge=1,
        le=200,
    )

    @property
    def enhancements_configured(self) -> bool:
        """Whether remote enhancements are both enabled and have credentials."""
        return self.api_enhancements_enabled and bool(self.sway_api_key)

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins (must be explicitly configured)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
