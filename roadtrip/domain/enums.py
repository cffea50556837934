"""Domain enums."""

from enum import Enum


class Category(str, Enum):
    TOURIST_ATTRACTION = "tourist_attraction"
    PARK = "park"
    MUSEUM = "museum"
    AMUSEMENT_PARK = "amusement_park"
    ZOO = "zoo"
    AQUARIUM = "aquarium"
    PLACE_OF_WORSHIP = "place_of_worship"
    RESTAURANT = "restaurant"
    LODGING = "lodging"


class CategoryGroup(str, Enum):
    ATTRACTION = "attraction"
    FOOD = "food"
    LODGING = "lodging"


class TimeSlot(str, Enum):
    MORNING = "morning"
    LUNCH = "lunch"
    AFTERNOON = "afternoon"
    LODGING = "lodging"


class Provider(str, Enum):
    GOOGLE = "google"
    OSRM = "osrm"
