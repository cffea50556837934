"""Domain constants shared by deterministic logic."""

from roadtrip.domain.enums import Category, CategoryGroup

# 擴充的景點類型：古蹟、寺廟、步道、博物館、花園、遊樂園等
ATTRACTION_CATEGORIES: tuple[Category, ...] = (
    Category.TOURIST_ATTRACTION,
    Category.PARK,
    Category.MUSEUM,
    Category.AMUSEMENT_PARK,
    Category.ZOO,
    Category.AQUARIUM,
    Category.PLACE_OF_WORSHIP,
)
FOOD_CATEGORIES: tuple[Category, ...] = (Category.RESTAURANT,)
LODGING_CATEGORIES: tuple[Category, ...] = (Category.LODGING,)

CATEGORY_GROUPS: dict[CategoryGroup, tuple[Category, ...]] = {
    CategoryGroup.ATTRACTION: ATTRACTION_CATEGORIES,
    CategoryGroup.FOOD: FOOD_CATEGORIES,
    CategoryGroup.LODGING: LODGING_CATEGORIES,
}

# Nearby Search keyword augmentation, most relevant first.
ATTRACTION_KEYWORDS: tuple[str, ...] = (
    "古蹟", "遺址", "寺", "宮", "廟", "祠", "步道", "健行", "登山",
    "博物館", "展館", "美術館", "園區", "花園", "花海", "森林", "景觀",
    "遊樂園", "樂園", "親子", "水族館", "動物園",
)

# Origin and destination closer than this are planned as a single-city trip.
NEAR_EQUAL_KM = 3.0

MIN_DAYS = 1
MAX_DAYS = 14
DEFAULT_DAYS = 5


def group_of(category: Category) -> CategoryGroup:
    for group, members in CATEGORY_GROUPS.items():
        if category in members:
            return group
    raise KeyError(category)
