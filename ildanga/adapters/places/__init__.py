"""Kakao Local place search adapter."""

from ildanga.adapters.places.real import (
    configuration_failure,
    coord_to_address,
    search_address,
    search_places_by_category,
    search_places_by_keyword,
)

__all__ = [
    "configuration_failure",
    "search_places_by_keyword",
    "search_places_by_category",
    "search_address",
    "coord_to_address",
]
