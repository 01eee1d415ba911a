"""MCP Git Command - stage and commit files in a git working tree over MCP stdio."""

__version__ = "1.0.0"
