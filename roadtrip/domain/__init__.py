"""Domain package exports."""

from roadtrip.domain.constants import (
    ATTRACTION_CATEGORIES,
    ATTRACTION_KEYWORDS,
    FOOD_CATEGORIES,
    LODGING_CATEGORIES,
)
from roadtrip.domain.enums import Category, CategoryGroup, Provider, TimeSlot
from roadtrip.domain.models import (
    Candidate,
    GeoPoint,
    ItineraryDay,
    PlanResult,
    RouteEndpoint,
    RoutePath,
    ScoredCandidate,
    SearchProbe,
)

__all__ = [
    "ATTRACTION_CATEGORIES",
    "ATTRACTION_KEYWORDS",
    "FOOD_CATEGORIES",
    "LODGING_CATEGORIES",
    "Candidate",
    "Category",
    "CategoryGroup",
    "GeoPoint",
    "ItineraryDay",
    "PlanResult",
    "Provider",
    "RouteEndpoint",
    "RoutePath",
    "ScoredCandidate",
    "SearchProbe",
    "TimeSlot",
]
