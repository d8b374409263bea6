"""
Gateway configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
The environment names (PORT, USERNAME, PASSWORD, REALM, BUCKET, PREFIX,
MAX_AGE, VERBOSE, INDEX) are kept exactly so the gateway can drop in
wherever the previous deployment read them.

Settings are frozen: they are built once at startup and shared read-only
by every request.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Gateway settings loaded from environment variables.

    CLI flags (see s3gateway.cli) are passed in as constructor keyword
    arguments and take precedence over the environment.
    """

    # HTTP listener
    port: str = Field(
        default="8080",
        description="Port to run on",
    )

    # Basic authentication
    username: str = Field(
        default="",
        description="The username to prompt for. Auth is enabled only when both username and password are set.",
    )
    password: str = Field(
        default="",
        description="The password to prompt for",
    )
    realm: str = Field(
        default="Realm",
        description="The challenge realm",
    )

    # Object storage
    bucket: str = Field(
        default="",
        description="The name of the S3 bucket to serve from",
    )
    prefix: str = Field(
        default="",
        description="Optional prefix to serve from, e.g. s3://bucket/prefix/...",
    )
    index_file: str = Field(
        default="index.html",
        validation_alias=AliasChoices("index_file", "INDEX"),
        description="Object served for paths ending in a slash",
    )
    region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("region", "AWS_REGION"),
        description="Region of the bucket",
    )
    endpoint_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("endpoint_url", "S3_ENDPOINT_URL"),
        description="Endpoint for S3-compatible services (MinIO, R2, ...). Leave unset for AWS.",
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Serve from an in-memory store instead of S3. Enables local dev without credentials.",
    )

    # Response behavior
    max_age: int = Field(
        default=90,
        ge=0,
        description="Cache-Control max-age, in seconds, sent with every object",
    )

    # Logging
    verbose: bool = Field(
        default=False,
        description="Enable enhanced logging (startup banner, auth attempts, key mapping)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("port")
    @classmethod
    def _port_is_numeric(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError("port must be a number")
        return value

    @field_validator("log_level")
    @classmethod
    def _log_level_is_known(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def requires_auth(self) -> bool:
        """Basic auth is enforced only when both username and password are set."""
        return self.username != "" and self.password != ""

    @property
    def bind_port(self) -> int:
        """Port as an integer for the ASGI server."""
        return int(self.port)

    def validate_required_fields(self) -> list[str]:
        """
        Return the environment names of required settings that are missing.

        Kept separate from Pydantic validation because a missing bucket is
        not fatal: the gateway still starts and every fetch fails with 404.
        """
        missing = []

        if not self.bucket and not self.storage_mock_mode:
            missing.append("BUCKET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, pass a Settings
    instance to create_app or call get_settings.cache_clear().
    """
    return Settings()
