"""Infrastructure services and cross-cutting utilities."""

from ildanga.infrastructure.logging import StructuredLogger, get_logger
from ildanga.infrastructure.trip_repository import (
    InMemoryTripRepository,
    JsonFileTripRepository,
    build_trip_repository,
)

__all__ = [
    "StructuredLogger",
    "get_logger",
    "InMemoryTripRepository",
    "JsonFileTripRepository",
    "build_trip_repository",
]
