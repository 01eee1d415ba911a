"""Server configuration loading and validation.

Loads settings for the MCP Git Command server from a YAML file or from
environment variables (a local .env file is honoured via python-dotenv).
"""
from __future__ import annotations
import os
import yaml
from pathlib import Path
from typing import Literal
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from mcp_git_command import __version__

CONFIG_ENV_VAR = "MCP_GIT_CONFIG"


class ServerConfig(BaseModel):
    """Complete server configuration."""
    server_name: str = Field("mcp-git-command", description="Name reported in serverInfo")
    server_version: str = Field(__version__, description="Version reported in serverInfo")
    protocol_version: str = Field("2024-11-05", description="MCP protocol version")
    git_executable: str = Field("git", description="git binary, looked up on PATH")
    command_timeout: float | None = Field(
        120.0, description="Per-command deadline in seconds (None disables)"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Log level")
    log_format: str = Field(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        description="logging format string"
    )

    @field_validator("git_executable")
    @classmethod
    def validate_executable(cls, v: str) -> str:
        """Reject an empty executable name."""
        if not v.strip():
            raise ValueError("git_executable must not be empty")
        return v

    @field_validator("command_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Validate the command deadline is positive."""
        if v is not None and v <= 0:
            raise ValueError("command_timeout must be positive or null")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> ServerConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated ServerConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Load configuration from environment variables.

        Reads MCP_GIT_EXECUTABLE, MCP_GIT_TIMEOUT and MCP_GIT_LOG_LEVEL.
        MCP_GIT_TIMEOUT set to "none" or "0" disables the deadline.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        load_dotenv()

        data: dict = {}
        executable = os.getenv("MCP_GIT_EXECUTABLE")
        if executable:
            data["git_executable"] = executable

        timeout = os.getenv("MCP_GIT_TIMEOUT")
        if timeout:
            if timeout.strip().lower() in ("none", "0"):
                data["command_timeout"] = None
            else:
                try:
                    data["command_timeout"] = float(timeout)
                except ValueError as e:
                    raise ValueError(f"MCP_GIT_TIMEOUT must be a number: {timeout!r}") from e

        log_level = os.getenv("MCP_GIT_LOG_LEVEL")
        if log_level:
            data["log_level"] = log_level

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in environment: {e}") from e


def load_config(config_path: str | Path | None = None) -> ServerConfig:
    """Load server configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file. Falls back to
            the file named by MCP_GIT_CONFIG, then to environment variables.

    Returns:
        Validated ServerConfig instance

    Raises:
        FileNotFoundError: If a named config file doesn't exist
        ValueError: If configuration is invalid
    """
    if config_path:
        return ServerConfig.from_yaml(config_path)

    load_dotenv()
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return ServerConfig.from_yaml(env_path)

    return ServerConfig.from_env()
