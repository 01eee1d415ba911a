"""Configuration management for the MCP Git Command server."""
from .settings import (
    ServerConfig,
    load_config,
)

__all__ = [
    "ServerConfig",
    "load_config",
]
