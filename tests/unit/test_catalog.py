"""Region catalog tests."""

from __future__ import annotations

import random

import pytest

from ildanga.domain.catalog import find_region, get_region, load_regions, random_region
from ildanga.domain.exceptions import RegionNotFoundError


def test_catalog_ids_are_unique_and_regions_are_complete():
    regions = load_regions()
    assert len(regions) >= 10
    assert len({r.id for r in regions}) == len(regions)
    for region in regions:
        assert region.name
        assert region.province
        assert -90 <= region.lat <= 90
        assert -180 <= region.lng <= 180


def test_gangneung_is_region_one():
    region = get_region(1)
    assert region.name == "강릉"
    assert region.lat == pytest.approx(37.7519)
    assert region.lng == pytest.approx(128.8761)


def test_unknown_region():
    assert find_region(9999) is None
    with pytest.raises(RegionNotFoundError) as exc_info:
        get_region(9999)
    assert exc_info.value.region_id == 9999


def test_random_region_is_from_catalog_and_seedable():
    ids = {r.id for r in load_regions()}
    first = random_region(random.Random(42))
    second = random_region(random.Random(42))
    assert first.id in ids
    assert first == second


def test_region_json_uses_camel_case():
    data = get_region(1).to_json_dict()
    assert set(data) == {"id", "name", "province", "slogan", "lat", "lng", "thumbnail", "highlights"}
