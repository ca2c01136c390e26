"""Static region catalog, loaded once from package data."""

from __future__ import annotations

import json
import random
from functools import lru_cache
from importlib import resources
from typing import Optional

from ildanga.domain.exceptions import RegionNotFoundError
from ildanga.domain.models import Region


@lru_cache(maxsize=1)
def load_regions() -> tuple[Region, ...]:
    raw = resources.files("ildanga.data").joinpath("regions.json").read_text(encoding="utf-8")
    regions = tuple(Region.model_validate(entry) for entry in json.loads(raw))
    ids = [r.id for r in regions]
    if len(ids) != len(set(ids)):
        raise ValueError("regions.json contains duplicate region ids")
    return regions


def find_region(region_id: int) -> Optional[Region]:
    for region in load_regions():
        if region.id == region_id:
            return region
    return None


def get_region(region_id: int) -> Region:
    region = find_region(region_id)
    if region is None:
        raise RegionNotFoundError(region_id)
    return region


def random_region(rng: Optional[random.Random] = None) -> Region:
    """홈 화면의 '랜덤 여행지 뽑기'."""
    regions = load_regions()
    chooser = rng or random
    return regions[chooser.randrange(len(regions))]
