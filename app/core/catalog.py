# app/core/catalog.py
"""
Fixed enumerations: the cities Assistix operates in and request categories.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class City:
    id: str
    name: str
    display_name: str


ACTIVE_CITIES: list[City] = [
    City(id="bilaspur_cg", name="Bilaspur", display_name="Bilaspur, C.G"),
    City(id="koni_bilaspur", name="Koni", display_name="Koni, Bilaspur"),
]

CATEGORIES: list[str] = [
    "Household",
    "Errands",
    "Tutoring",
    "Tech Help",
    "Moving",
    "Repairs",
    "Pet Care",
    "Other",
]

# Categories of the first (non-hyperlocal) product iteration.
# Only demo-data cleanup still looks at them.
RETIRED_CATEGORIES: list[str] = [
    "Technology",
    "Design",
    "Writing",
    "Marketing",
    "Finance",
    "Legal",
]


def get_city_by_id(city_id: str) -> City | None:
    for city in ACTIVE_CITIES:
        if city.id == city_id:
            return city
    return None


def get_city_display_name(city_id: str) -> str:
    city = get_city_by_id(city_id)
    return city.display_name if city else "Unknown City"
