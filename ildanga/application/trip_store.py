"""Trip session store — the single owner of the in-progress TripSession.

Every mutation goes through this object and is followed by an explicit save
to the injected repository, so a restarted client resumes where it stopped.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from pydantic import ValidationError

from ildanga.domain.enums import TripStyle
from ildanga.domain.models import (
    Attraction,
    DaySchedule,
    Region,
    Restaurant,
    ScheduleItem,
    TransportInfo,
    TripSession,
)
from ildanga.domain.scheduling import build_schedule
from ildanga.infrastructure.trip_repository import TripStateRepository

_logger = logging.getLogger("ildanga.trip_store")


class TripSessionStore:
    def __init__(self, repository: TripStateRepository) -> None:
        self._repository = repository
        self._session = self._rehydrate()

    def _rehydrate(self) -> TripSession:
        raw = self._repository.load()
        if raw is None:
            return TripSession()
        try:
            return TripSession.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Discarding unreadable persisted trip: %s", exc.error_count())
            self._repository.clear()
            return TripSession()

    def _commit(self) -> None:
        self._repository.save(self._session.to_json_dict())

    # ── 읽기 ──────────────────────────────────────────

    def snapshot(self) -> TripSession:
        """Deep copy, so callers cannot mutate the store behind its back."""
        return self._session.model_copy(deep=True)

    @property
    def destination(self) -> Optional[Region]:
        return self._session.destination

    @property
    def duration(self) -> int:
        return self._session.duration

    @property
    def start_date(self) -> Optional[str]:
        return self._session.start_date

    @property
    def trip_style(self) -> Optional[TripStyle]:
        return self._session.trip_style

    @property
    def selected_attractions(self) -> list[Attraction]:
        return list(self._session.selected_attractions)

    @property
    def selected_restaurants(self) -> list[Restaurant]:
        return list(self._session.selected_restaurants)

    @property
    def schedule(self) -> list[DaySchedule]:
        return [day.model_copy(deep=True) for day in self._session.schedule]

    @property
    def transport(self) -> Optional[TransportInfo]:
        return self._session.transport

    def has_attraction(self, attraction_id: str) -> bool:
        return any(a.id == attraction_id for a in self._session.selected_attractions)

    def has_restaurant(self, restaurant_id: str) -> bool:
        return any(r.id == restaurant_id for r in self._session.selected_restaurants)

    # ── 여행지 설정 ──────────────────────────────────────

    def set_destination(self, region: Optional[Region]) -> None:
        self._session.destination = region
        self._commit()

    def set_duration(self, days: int) -> None:
        self._session.duration = max(1, int(days))
        self._commit()

    def set_start_date(self, date: Optional[str]) -> None:
        self._session.start_date = date
        self._commit()

    def set_trip_style(self, style: Optional[TripStyle]) -> None:
        self._session.trip_style = TripStyle(style) if style is not None else None
        self._commit()

    # ── 관광지 ──────────────────────────────────────────

    def add_attraction(self, attraction: Attraction) -> None:
        if self.has_attraction(attraction.id):
            return
        self._session.selected_attractions.append(attraction.model_copy(update={"is_selected": True}))
        self._commit()

    def remove_attraction(self, attraction_id: str) -> None:
        self._session.selected_attractions = [
            a for a in self._session.selected_attractions if a.id != attraction_id
        ]
        self._commit()

    def clear_attractions(self) -> None:
        self._session.selected_attractions = []
        self._commit()

    # ── 맛집 ──────────────────────────────────────────

    def add_restaurant(self, restaurant: Restaurant) -> None:
        if self.has_restaurant(restaurant.id):
            return
        self._session.selected_restaurants.append(restaurant.model_copy(update={"is_selected": True}))
        self._commit()

    def remove_restaurant(self, restaurant_id: str) -> None:
        self._session.selected_restaurants = [
            r for r in self._session.selected_restaurants if r.id != restaurant_id
        ]
        self._commit()

    def clear_restaurants(self) -> None:
        self._session.selected_restaurants = []
        self._commit()

    # ── 일정 ──────────────────────────────────────────

    def set_schedule(self, schedule: Sequence[DaySchedule]) -> None:
        self._session.schedule = [day.model_copy(deep=True) for day in schedule]
        self._commit()

    def update_day_schedule(self, day: int, items: Sequence[ScheduleItem]) -> None:
        """Replace the items of ``day``. Unknown days are ignored."""
        for idx, existing in enumerate(self._session.schedule):
            if existing.day == day:
                self._session.schedule[idx] = existing.model_copy(update={"items": list(items)})
                break
        self._commit()

    def generate_schedule(self) -> list[DaySchedule]:
        self._session.schedule = build_schedule(
            self._session.duration,
            self._session.selected_attractions,
            self._session.selected_restaurants,
            start_date=self._session.start_date,
        )
        self._commit()
        return self.schedule

    # ── 교통편 ──────────────────────────────────────────

    def set_transport(self, transport: Optional[TransportInfo]) -> None:
        self._session.transport = transport
        self._commit()

    def reset_trip(self) -> None:
        self._session = TripSession()
        self._commit()
