"""Shared (non-domain) exceptions."""

from __future__ import annotations

from typing import Any, Optional


class ToolError(Exception):
    """Tool invocation failed."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        self.message = message
        super().__init__(f"[{tool}] {message}")


class ExternalServiceError(Exception):
    """External service call failed."""


class KeyMissingError(Exception):
    """Required key is missing."""

    def __init__(self, name: str):
        self.key_name = name
        super().__init__(f"Missing required API key: {name} (configure it in .env)")


class InvalidRequestError(ExternalServiceError):
    """Client input rejected before any upstream call."""


class UpstreamParseError(ExternalServiceError):
    """Upstream body could not be parsed or failed schema validation."""


class UpstreamApiError(ExternalServiceError):
    """Upstream answered with a well-formed error envelope."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.details = details
        super().__init__(message)
