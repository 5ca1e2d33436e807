"""
Public menu router.
Serves published menus to diners who scanned a QR code.
No authentication required.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.services.catalog import PublicMenuService
from shared.infrastructure.db import get_db
from shared.utils.schemas import ErrorResponse, PublicRestaurant, PublicRestaurantMenu


router = APIRouter(
    prefix="/api/public",
    tags=["public"],
    responses={404: {"model": ErrorResponse}},
)


@router.get("/r/{restaurant_slug}", response_model=PublicRestaurantMenu)
def get_restaurant_menu(
    restaurant_slug: str,
    locale: str | None = Query(default=None, max_length=10),
    db: Session = Depends(get_db),
) -> PublicRestaurantMenu:
    """
    Restaurant page with its first published menu.
    This is the URL encoded in the QR codes.
    """
    return PublicMenuService(db).get_menu(restaurant_slug, locale=locale)


@router.get("/r/{restaurant_slug}/{menu_slug}", response_model=PublicRestaurantMenu)
def get_menu(
    restaurant_slug: str,
    menu_slug: str,
    locale: str | None = Query(default=None, max_length=10),
    db: Session = Depends(get_db),
) -> PublicRestaurantMenu:
    """A specific published menu of the restaurant."""
    return PublicMenuService(db).get_menu(restaurant_slug, menu_slug, locale=locale)


@router.get("/restaurants/{restaurant_slug}", response_model=PublicRestaurant)
def get_restaurant(
    restaurant_slug: str,
    locale: str | None = Query(default=None, max_length=10),
    db: Session = Depends(get_db),
) -> PublicRestaurant:
    """Restaurant contact data and the list of its published menus."""
    return PublicMenuService(db).get_restaurant(restaurant_slug, locale=locale)
