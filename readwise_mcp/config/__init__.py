"""Configuration loading and management."""

from readwise_mcp.config.loader import (
    ServerConfig,
    Settings,
    build_server_config,
    get_settings,
    load_api_config,
    load_settings,
)

__all__ = [
    "ServerConfig",
    "Settings",
    "build_server_config",
    "get_settings",
    "load_api_config",
    "load_settings",
]
