"""Configuration and settings management using pydantic-settings."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppStructSettings(BaseSettings):
    """AppStruct node pack settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="APPSTRUCT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API endpoint
    api_base_url: str = Field(
        default="https://api.appstruct.cloud",
        description="AppStruct API base URL",
    )
    graphql_path: str = Field(
        default="/graphql",
        description="Path of the GraphQL endpoint below the base URL",
    )

    # Runtime limits
    request_timeout_s: float = Field(
        default=30,
        description="Timeout for every HTTP request in seconds",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    @field_validator("request_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the request timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_s must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def graphql_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}{self.graphql_path}"


# Global settings instance
_settings: AppStructSettings | None = None


def get_settings() -> AppStructSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppStructSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
