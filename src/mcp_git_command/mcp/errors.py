"""Dispatcher-level errors, surfaced to clients as JSON-RPC errors."""
from __future__ import annotations
from typing import Any


class UnknownOperation(ValueError):
    """Raised when tools/call names a tool that is not registered."""

    def __init__(self, name: Any):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidArguments(ValueError):
    """Raised when tool arguments fail validation against the tool's input model."""

    def __init__(self, name: str, errors: list[dict[str, Any]]):
        self.name = name
        self.errors = errors
        super().__init__(f"Invalid arguments for tool {name}")
