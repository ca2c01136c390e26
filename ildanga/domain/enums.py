"""Domain enums."""

from enum import Enum


class TripStyle(str, Enum):
    RELAXED = "RELAXED"
    NORMAL = "NORMAL"
    PACKED = "PACKED"


class ScheduleItemType(str, Enum):
    ATTRACTION = "attraction"
    RESTAURANT = "restaurant"
    TRANSPORT = "transport"


class TransportType(str, Enum):
    CAR = "car"
    PUBLIC = "public"
    WALK = "walk"
