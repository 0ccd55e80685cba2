"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from readwise_mcp.mcp.models import Tool

DEFAULT_PORT = 3000

# MCP protocol version we announce
PROTOCOL_VERSION = "2024-11-05"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream Readwise access token (required)
    readwise_token: str = Field(..., min_length=1)

    # Shared secret for the MCP endpoints; empty disables authentication
    mcp_api_key: str = ""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Timeouts
    default_timeout: int = 30
    sse_keepalive_seconds: float = 30.0

    # Server info
    server_name: str = "readwise-mcp-enhanced"
    server_version: str = "1.0.0"

    # Host and port
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("port", mode="before")
    @classmethod
    def _fallback_port(cls, value: Any) -> int:
        try:
            port = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PORT
        return port or DEFAULT_PORT

    @property
    def auth_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return bool(self.mcp_api_key)


class ServerConfig(BaseModel):
    """Immutable server configuration shared by the auth gate and the router."""

    model_config = ConfigDict(frozen=True)

    server_name: str
    server_version: str
    protocol_version: str = PROTOCOL_VERSION
    tools: tuple[Tool, ...] = ()
    api_key: str | None = None

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)


def build_server_config(settings: Settings, tools: list[Tool] | tuple[Tool, ...]) -> ServerConfig:
    """Freeze the settings and tool catalog into a ServerConfig."""
    return ServerConfig(
        server_name=settings.server_name,
        server_version=settings.server_version,
        tools=tuple(tools),
        api_key=settings.mcp_api_key or None,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_settings() -> Settings:
    """
    Load settings, exiting the process when they are unusable.

    Serving requests without the Readwise token is meaningless, so a
    missing token stops startup with exit status 1.
    """
    try:
        return get_settings()
    except ValidationError as e:
        log = structlog.get_logger("startup")
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        if "readwise_token" in missing:
            log.error("READWISE_TOKEN environment variable is required")
            log.error("Please set READWISE_TOKEN in your environment variables.")
            log.error("Get your token from: https://readwise.io/access_token")
        else:
            log.error("Invalid configuration", fields=missing)
        raise SystemExit(1) from e


def load_api_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load provider configuration from YAML file.

    Args:
        config_path: Path to the config file. If None, uses default location.

    Returns:
        Dictionary with configuration data.
    """
    if config_path is None:
        # Try to find config relative to project root
        possible_paths = [
            Path("config/apis.yaml"),
            Path(__file__).parent.parent.parent / "config" / "apis.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            return {"enabled_providers": ["readwise"], "providers": {}}

    config_path = Path(config_path)
    if not config_path.exists():
        return {"enabled_providers": ["readwise"], "providers": {}}

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def get_enabled_providers(config: dict[str, Any] | None = None) -> list[str]:
    """Get list of enabled provider names."""
    if config is None:
        config = load_api_config()
    return config.get("enabled_providers", ["readwise"])


def get_provider_config(provider_name: str, config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get configuration for a specific provider."""
    if config is None:
        config = load_api_config()
    providers = config.get("providers") or {}
    return providers.get(provider_name) or {}
