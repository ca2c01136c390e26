"""TourAPI (KorService2) attraction adapter."""

from ildanga.adapters.tour.real import (
    configuration_failure,
    get_attraction_detail,
    list_area_codes,
    list_attractions_by_area,
    list_attractions_near_location,
    search_attractions_by_keyword,
)

__all__ = [
    "configuration_failure",
    "list_attractions_by_area",
    "list_attractions_near_location",
    "search_attractions_by_keyword",
    "get_attraction_detail",
    "list_area_codes",
]
