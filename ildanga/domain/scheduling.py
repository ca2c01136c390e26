"""Day-bucket schedule construction.

A plain in-order bucket fill: no route optimization, no time-of-day slots.
"""

from __future__ import annotations

import datetime as dt
import math
from collections.abc import Sequence
from typing import Optional

from ildanga.domain.enums import ScheduleItemType
from ildanga.domain.models import (
    ATTRACTION_VISIT_MINUTES,
    RESTAURANT_VISIT_MINUTES,
    Attraction,
    DaySchedule,
    Restaurant,
    ScheduleItem,
)


def attraction_to_item(attraction: Attraction) -> ScheduleItem:
    return ScheduleItem(
        id=f"attraction-{attraction.id}",
        type=ScheduleItemType.ATTRACTION,
        name=attraction.title,
        address=attraction.addr1,
        lat=attraction.mapy,
        lng=attraction.mapx,
        image=attraction.first_image or None,
        duration=ATTRACTION_VISIT_MINUTES,
    )


def restaurant_to_item(restaurant: Restaurant) -> ScheduleItem:
    return ScheduleItem(
        id=f"restaurant-{restaurant.id}",
        type=ScheduleItemType.RESTAURANT,
        name=restaurant.place_name,
        address=restaurant.address_name,
        lat=restaurant.y,
        lng=restaurant.x,
        duration=RESTAURANT_VISIT_MINUTES,
    )


def _day_date(start_date: Optional[str], day: int) -> Optional[str]:
    if not start_date:
        return None
    try:
        start = dt.date.fromisoformat(start_date)
    except ValueError:
        return None
    return (start + dt.timedelta(days=day - 1)).isoformat()


def build_schedule(
    duration: int,
    attractions: Sequence[Attraction],
    restaurants: Sequence[Restaurant],
    *,
    start_date: Optional[str] = None,
) -> list[DaySchedule]:
    """Spread attractions (first) then restaurants over ``duration`` days.

    ``items_per_day = ceil(total / duration)``; item ``idx`` lands on day
    ``min(idx // items_per_day, duration - 1)`` so a remainder piles onto
    the last day.
    """
    duration = max(1, int(duration))
    schedule = [DaySchedule(day=day, date=_day_date(start_date, day)) for day in range(1, duration + 1)]

    places = [attraction_to_item(a) for a in attractions] + [restaurant_to_item(r) for r in restaurants]
    if not places:
        return schedule

    per_day = math.ceil(len(places) / duration)
    for idx, place in enumerate(places):
        schedule[min(idx // per_day, duration - 1)].items.append(place)
    return schedule
