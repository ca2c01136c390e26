"""Pydantic domain models.

Attributes are snake_case; the JSON form (API payloads and the persisted trip)
uses camelCase aliases.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ildanga.domain.enums import ScheduleItemType, TransportType, TripStyle

ATTRACTION_VISIT_MINUTES = 90
RESTAURANT_VISIT_MINUTES = 60


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Region(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    name: str
    province: str
    slogan: str = ""
    lat: float
    lng: float
    thumbnail: str = ""
    highlights: list[str] = Field(default_factory=list)


class Attraction(CamelModel):
    id: str
    content_id: str
    content_type_id: str = ""
    title: str
    addr1: str = ""
    addr2: str = ""
    tel: str = ""
    first_image: str = ""
    first_image2: str = ""
    mapx: float = 0.0
    mapy: float = 0.0
    overview: str = ""
    homepage: str = ""
    use_time: str = ""
    rest_date: str = ""
    parking: str = ""
    is_selected: bool = False


class Restaurant(CamelModel):
    id: str
    place_name: str
    category_name: str = ""
    category_group_code: str = ""
    category_group_name: str = ""
    phone: str = ""
    address_name: str = ""
    road_address_name: str = ""
    x: float = 0.0
    y: float = 0.0
    place_url: str = ""
    distance: str = ""
    is_selected: bool = False


class Address(CamelModel):
    address_name: str = ""
    road_address_name: str = ""
    region_1depth_name: str = ""
    region_2depth_name: str = ""
    region_3depth_name: str = ""
    x: float = 0.0
    y: float = 0.0


class AreaCode(CamelModel):
    code: str
    name: str
    rnum: int = 0


class ScheduleItem(CamelModel):
    id: str
    type: ScheduleItemType
    name: str
    address: str = ""
    lat: float = 0.0
    lng: float = 0.0
    image: Optional[str] = None
    duration: int = Field(description="체류 시간 (분)")
    memo: Optional[str] = None


class DaySchedule(CamelModel):
    day: int = Field(ge=1)
    date: Optional[str] = None
    items: list[ScheduleItem] = Field(default_factory=list)


class TransportInfo(CamelModel):
    type: TransportType
    origin: str
    destination: str
    distance: Optional[float] = Field(default=None, description="km")
    duration: Optional[int] = Field(default=None, description="분")
    cost: Optional[int] = Field(default=None, description="원")


class TripSession(CamelModel):
    destination: Optional[Region] = None
    duration: int = 1
    start_date: Optional[str] = None
    trip_style: Optional[TripStyle] = None
    selected_attractions: list[Attraction] = Field(default_factory=list)
    selected_restaurants: list[Restaurant] = Field(default_factory=list)
    schedule: list[DaySchedule] = Field(default_factory=list)
    transport: Optional[TransportInfo] = None

    @field_validator("duration", mode="before")
    @classmethod
    def _clamp_duration(cls, value: object) -> int:
        try:
            return max(1, int(value))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1


# ── 자동 일정 생성 요청 본문 ──────────────────────────────

class PlanDestination(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    province: str = ""
    slogan: str = ""
    highlights: list[str] = Field(default_factory=list)


class PlanAttraction(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str
    addr1: str = ""


class PlanRestaurant(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    place_name: str
    category_name: str = ""
    address_name: str = ""


class PlanBrief(CamelModel):
    """What the AI plan generator needs to know about a trip."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    destination: PlanDestination
    duration: int = Field(default=1, ge=1)
    attractions: list[PlanAttraction] = Field(default_factory=list)
    restaurants: list[PlanRestaurant] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: TripSession) -> "PlanBrief":
        if session.destination is None:
            raise ValueError("trip has no destination")
        region = session.destination
        return cls(
            destination=PlanDestination(
                name=region.name,
                province=region.province,
                slogan=region.slogan,
                highlights=list(region.highlights),
            ),
            duration=session.duration,
            attractions=[PlanAttraction(title=a.title, addr1=a.addr1) for a in session.selected_attractions],
            restaurants=[
                PlanRestaurant(place_name=r.place_name, category_name=r.category_name, address_name=r.address_name)
                for r in session.selected_restaurants
            ],
        )
