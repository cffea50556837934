"""Address enrichment for the places that made it into the itinerary.

Only selected places are reverse geocoded. Each one gets its county/city and
district prefixed to the display address exactly once, as
``city · district · rest``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional, Sequence

from roadtrip.domain.models import ItineraryDay, ScoredCandidate
from roadtrip.planner.assembly import selected_place_ids
from roadtrip.shared.exceptions import UpstreamError
from roadtrip.tools.interfaces import AddressComponent, GeocodeTool

if TYPE_CHECKING:
    from roadtrip.application.context import PlanContext

SEPARATOR = " · "

_CITY_TYPES = ("administrative_area_level_2", "locality", "postal_town")
_DISTRICT_TYPES = ("sublocality_level_1", "administrative_area_level_3", "neighborhood")
_PUNCT_RE = re.compile(r"[·・•‧．.]")
_SPACE_RE = re.compile(r"\s+")


def _find(components: Sequence[AddressComponent], wanted: Sequence[str]) -> Optional[str]:
    for kind in wanted:
        for comp in components:
            if kind in comp.types and comp.long_name:
                return comp.long_name
    return None


def _norm_token(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    cleaned = _PUNCT_RE.sub("", _SPACE_RE.sub("", value))
    return cleaned or None


def extract_city_district(components: Sequence[AddressComponent]) -> tuple[Optional[str], Optional[str]]:
    """(county/city, district) from geocoder components, whitespace and dots removed."""
    return _norm_token(_find(components, _CITY_TYPES)), _norm_token(_find(components, _DISTRICT_TYPES))


def format_address_with_city(
    address: Optional[str],
    city: Optional[str] = None,
    district: Optional[str] = None,
) -> str:
    """Prefix ``city · district`` to ``address`` once.

    Leading city/district tokens already in the address (with or without the
    separator) are stripped first, so formatting an already formatted address
    returns it unchanged.
    """
    head_parts: list[str] = []
    if city:
        head_parts.append(city)
    if district and (not city or not district.startswith(city)):
        head_parts.append(district)

    rest = _SPACE_RE.sub(" ", address or "").strip()
    tokens = [t for t in (city, district) if t]
    if rest and tokens:
        # longest first so 新竹市 wins over a district that is its prefix
        alternation = "|".join(re.escape(t) for t in sorted(tokens, key=len, reverse=True))
        leading = re.compile(rf"^(?:{alternation})(?:\s*·\s*|\s+)?")
        while True:
            stripped = leading.sub("", rest, count=1).strip()
            if stripped == rest:
                break
            rest = stripped

    head = SEPARATOR.join(head_parts)
    if head:
        return f"{head}{SEPARATOR}{rest}" if rest else head
    return rest


def _apply(item: Optional[ScoredCandidate], updated: dict[str, ScoredCandidate]) -> Optional[ScoredCandidate]:
    if item is None or not item.place_id:
        return item
    return updated.get(item.place_id, item)


def enrich_selected(
    itinerary: list[ItineraryDay],
    pool: list[ScoredCandidate],
    geocoder: GeocodeTool,
    ctx: "PlanContext",
) -> tuple[list[ItineraryDay], list[ScoredCandidate]]:
    """Reverse geocode every selected place and rewrite its address.

    Returns new itinerary and pool lists; the inputs are left untouched. A
    failed lookup leaves that place with its trimmed original address.
    """
    ids = selected_place_ids(itinerary)
    by_id = {p.place_id: p for p in pool if p.place_id}
    pause_ms = ctx.settings.enrichment.pause_ms
    updated: dict[str, ScoredCandidate] = {}
    failures = 0

    ctx.logger.stage_start("enrichment", selected=len(ids))
    for place_id in ids:
        place = by_id.get(place_id)
        if place is None:
            continue
        ctx.checkpoint()
        try:
            reverse = geocoder.reverse_geocode(place.lat, place.lng)
        except UpstreamError as exc:
            failures += 1
            ctx.record_failure()
            ctx.logger.warning("enrichment", exc.detail, place_id=place_id)
            updated[place_id] = place.model_copy(update={"address": (place.address or "").strip() or None})
            continue
        city, district = extract_city_district(reverse.components)
        updated[place_id] = place.model_copy(
            update={
                "city": city,
                "district": district,
                "address": format_address_with_city(place.address, city, district) or None,
            }
        )
        ctx.pause(pause_ms)
    ctx.logger.stage_end("enrichment", enriched=len(updated) - failures, failed=failures)

    new_pool = [_apply(p, updated) for p in pool]
    new_days = [
        day.model_copy(
            update={
                "morning": [_apply(p, updated) for p in day.morning],
                "lunch": _apply(day.lunch, updated),
                "afternoon": [_apply(p, updated) for p in day.afternoon],
                "lodging": _apply(day.lodging, updated),
            }
        )
        for day in itinerary
    ]
    return new_days, new_pool
