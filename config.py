"""Configuration management for URL shortener."""

import os
from typing import Optional, Tuple, Type

from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
)

CONFIG_FILE_ENV = "CONFIG"


def split_server_address(address: Optional[str]) -> Tuple[Optional[str], Optional[int]]:
    """Split a ``host:port`` address; either part may be omitted.

    Raises:
        ValueError: If the port is not a number
    """
    if not address:
        return None, None

    host, sep, port = address.rpartition(":")
    if not sep:
        return address, None
    if not port.isdigit():
        raise ValueError(f"invalid server address: {address}")
    return host or None, int(port)


class Config(BaseSettings):
    """Application configuration.

    Sources, highest priority first: constructor arguments (command-line
    flags), environment variables, ``.env``, then the JSON file named by
    the ``CONFIG`` environment variable.
    """

    # Server settings
    host: str = Field(
        default="localhost",
        description="Host to bind to"
    )

    port: int = Field(
        default=8080,
        description="Port to listen on"
    )

    server_address: Optional[str] = Field(
        default=None,
        description="host:port to listen on; overrides host and port when set"
    )

    # URL shortener settings
    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL for generating short URLs"
    )

    short_code_bytes: int = Field(
        default=6,
        ge=1,
        le=32,
        description="Digest bytes encoded into each short code (6 bytes -> 8 characters)"
    )

    # Storage settings
    file_storage_path: str = Field(
        default="storage.txt",
        description="Append-only log file; empty keeps records in memory only"
    )

    database_dsn: str = Field(
        default="",
        description="PostgreSQL DSN; takes precedence over file storage when set"
    )

    pool_max_size: int = Field(
        default=10,
        ge=1,
        description="Maximum PostgreSQL connection pool size"
    )

    connection_timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="PostgreSQL connection and command timeout"
    )

    # Auth settings
    secret_key: str = Field(
        default="secret",
        description="HMAC key for signing AUTH_TOKEN cookies"
    )

    trusted_subnet: str = Field(
        default="",
        description="CIDR allowed to read /api/internal/stats; empty denies everyone"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @model_validator(mode="after")
    def apply_server_address(self) -> "Config":
        host, port = split_server_address(self.server_address)
        if host:
            self.host = host
        if port is not None:
            self.port = port
        return self

    @model_validator(mode="after")
    def check_base_url(self) -> "Config":
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        self.base_url = self.base_url.rstrip("/")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        sources = [init_settings, env_settings, dotenv_settings]
        config_file = os.getenv(CONFIG_FILE_ENV)
        if config_file:
            sources.append(JsonConfigSettingsSource(settings_cls, json_file=config_file))
        sources.append(file_secret_settings)
        return tuple(sources)


def load_config(config_file: Optional[str] = None, **overrides) -> Config:
    """Load configuration from flags, environment and an optional JSON file.

    Args:
        config_file: JSON config file; overrides the ``CONFIG`` environment variable
        **overrides: Values that win over every other source (unset ones are ignored)

    Returns:
        Config instance
    """
    if config_file:
        os.environ[CONFIG_FILE_ENV] = config_file

    values = {key: value for key, value in overrides.items() if value is not None}
    return Config(**values)
