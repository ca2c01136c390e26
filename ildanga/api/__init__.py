"""HTTP proxy service."""
