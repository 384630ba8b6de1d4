# app/routers/catalog.py
from dataclasses import asdict

from fastapi import APIRouter

from app.core.catalog import ACTIVE_CITIES, CATEGORIES

router = APIRouter(tags=["Catalog"])


@router.get("/cities")
def list_cities() -> list[dict[str, str]]:
    """Cities where Assistix operates."""
    return [asdict(city) for city in ACTIVE_CITIES]


@router.get("/categories")
def list_categories() -> list[str]:
    return CATEGORIES
