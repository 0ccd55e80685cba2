"""Utility modules: logging and HTTP client."""

from readwise_mcp.utils.logging import setup_logging, get_logger
from readwise_mcp.utils.http import create_http_client, http_retry

__all__ = [
    "setup_logging",
    "get_logger",
    "create_http_client",
    "http_retry",
]
