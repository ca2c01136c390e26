"""Shared cross-layer types and exceptions."""

from ildanga.shared.exceptions import (
    ExternalServiceError,
    InvalidRequestError,
    KeyMissingError,
    ToolError,
    UpstreamApiError,
    UpstreamParseError,
)

__all__ = [
    "ToolError",
    "ExternalServiceError",
    "KeyMissingError",
    "InvalidRequestError",
    "UpstreamParseError",
    "UpstreamApiError",
]
