"""Address enrichment tests."""

from __future__ import annotations

import io

from roadtrip.application.context import make_plan_context
from roadtrip.config.settings import EngineSettings
from roadtrip.domain.enums import Category
from roadtrip.domain.models import ItineraryDay, ScoredCandidate
from roadtrip.infrastructure.logging import StructuredLogger
from roadtrip.planner.enrichment import enrich_selected, extract_city_district, format_address_with_city
from roadtrip.shared.exceptions import UpstreamError
from roadtrip.tools.interfaces import AddressComponent, ReverseGeocodeResult

_TAIPEI = [
    AddressComponent(long_name="松仁路", types=["route"]),
    AddressComponent(long_name="信義區", types=["administrative_area_level_3", "political"]),
    AddressComponent(long_name="台北市", types=["administrative_area_level_1", "political"]),
    AddressComponent(long_name="台 北 市", types=["administrative_area_level_2", "political"]),
]


class FakeGeocoder:
    def __init__(self, components=None, fail_ids=()):
        self.calls = []
        self._components = components if components is not None else _TAIPEI
        self._fail_at = set(fail_ids)

    def geocode(self, query):
        raise AssertionError("forward geocoding is not used by enrichment")

    def reverse_geocode(self, lat, lng):
        self.calls.append((lat, lng))
        if (lat, lng) in self._fail_at:
            raise UpstreamError("google_geocoding", "REQUEST_DENIED")
        return ReverseGeocodeResult(formatted_address="", components=self._components)


def _ctx():
    return make_plan_context(
        EngineSettings(),
        timeout_seconds=60,
        logger=StructuredLogger(trace_id="test", output=io.StringIO()),
        sleep=lambda _s: None,
    )


def _place(pid, address, lat=25.03, category=Category.TOURIST_ATTRACTION):
    return ScoredCandidate(place_id=pid, name=pid, lat=lat, lng=121.56, category=category, address=address)


def test_extract_city_district_prefers_level_2_and_normalizes():
    city, district = extract_city_district(_TAIPEI)
    assert city == "台北市"
    assert district == "信義區"


def test_extract_city_district_fallbacks():
    components = [
        AddressComponent(long_name="Hengchun", types=["locality"]),
        AddressComponent(long_name="Kenting", types=["neighborhood"]),
    ]
    assert extract_city_district(components) == ("Hengchun", "Kenting")
    assert extract_city_district([]) == (None, None)


def test_format_prefixes_city_and_district():
    assert format_address_with_city("松仁路100號", "台北市", "信義區") == "台北市 · 信義區 · 松仁路100號"


def test_format_strips_existing_leading_tokens():
    assert format_address_with_city("台北市信義區松仁路100號", "台北市", "信義區") == "台北市 · 信義區 · 松仁路100號"
    assert format_address_with_city("  信義區 · 松仁路  100號 ", "台北市", "信義區") == "台北市 · 信義區 · 松仁路 100號"


def test_format_twice_does_not_double_prefix():
    once = format_address_with_city("台北市信義區松仁路100號", "台北市", "信義區")
    assert format_address_with_city(once, "台北市", "信義區") == once


def test_format_skips_district_that_repeats_city():
    assert format_address_with_city("東大路一段", "新竹市", "新竹市東區") == "新竹市 · 東大路一段"


def test_format_without_tokens_only_trims():
    assert format_address_with_city("  墾丁大街 ", None, None) == "墾丁大街"
    assert format_address_with_city(None, "屏東縣", None) == "屏東縣"
    assert format_address_with_city(None, None, None) == ""


def test_enrich_selected_rewrites_only_selected_places():
    chosen = _place("p1", "松仁路100號")
    lunch = _place("r1", "信義區松高路11號", lat=25.04, category=Category.RESTAURANT)
    unused = _place("p9", "市府路1號", lat=25.05)
    day = ItineraryDay(day_number=1, morning=[chosen], lunch=lunch)
    geocoder = FakeGeocoder()

    days, pool = enrich_selected([day], [chosen, lunch, unused], geocoder, _ctx())

    assert len(geocoder.calls) == 2
    assert days[0].morning[0].address == "台北市 · 信義區 · 松仁路100號"
    assert days[0].morning[0].city == "台北市"
    assert days[0].lunch.district == "信義區"
    assert days[0].lunch.address == "台北市 · 信義區 · 松高路11號"
    assert [p.address for p in pool] == [
        "台北市 · 信義區 · 松仁路100號",
        "台北市 · 信義區 · 松高路11號",
        "市府路1號",
    ]
    # 輸入物件不被修改
    assert chosen.address == "松仁路100號"


def test_enrich_selected_twice_is_stable():
    chosen = _place("p1", "松仁路100號")
    day = ItineraryDay(day_number=1, morning=[chosen])
    days, pool = enrich_selected([day], [chosen], FakeGeocoder(), _ctx())
    again_days, again_pool = enrich_selected(days, pool, FakeGeocoder(), _ctx())

    assert again_days[0].morning[0].address == days[0].morning[0].address
    assert again_pool[0].address.count("台北市") == 1


def test_enrich_selected_failure_keeps_trimmed_address():
    ok = _place("ok", "松仁路100號")
    broken = _place("broken", "  光復南路  ", lat=25.01)
    day = ItineraryDay(day_number=1, morning=[ok, broken])
    ctx = _ctx()

    days, _pool = enrich_selected([day], [ok, broken], FakeGeocoder(fail_ids={(25.01, 121.56)}), ctx)

    assert days[0].morning[0].address.startswith("台北市")
    assert days[0].morning[1].address == "光復南路"
    assert days[0].morning[1].city is None
    assert ctx.failed_calls == 1
