"""
Shared Pydantic schemas used across the application.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["SUPER_ADMIN", "ADMIN", "MANAGER", "EDITOR"]
MenuStatusLiteral = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]
TenantStatusLiteral = Literal["active", "suspended", "cancelled"]


class ErrorResponse(BaseModel):
    """Error body returned by the API."""

    detail: str


# =============================================================================
# Public Menu Schemas
# =============================================================================


class PublicPrice(BaseModel):
    """A labelled price of an item."""

    model_config = ConfigDict(from_attributes=True)

    label: str
    currency: str
    amount: Decimal


class PublicItem(BaseModel):
    """An item as seen by unauthenticated diners."""

    id: int
    name: str
    description: str | None = None
    prices: list[PublicPrice] = Field(default_factory=list)
    icons: list[str] = Field(default_factory=list)  # icon codes


class PublicSection(BaseModel):
    """A section with its active items, in display order."""

    id: int
    name: str
    sort_order: int
    items: list[PublicItem] = Field(default_factory=list)


class PublicMenuSummary(BaseModel):
    """Published menu listed on a restaurant page."""

    id: int
    name: str
    slug: str
    description: str | None = None


class PublicMenu(PublicMenuSummary):
    """Full published menu."""

    qr_url: str | None = None  # public URL encoded by the QR code
    qr_image_url: str | None = None  # data:image/png;base64,...
    translations: dict[str, str] = Field(default_factory=dict)
    sections: list[PublicSection] = Field(default_factory=list)


class PublicRestaurant(BaseModel):
    """Restaurant page: contact data, published menus and translated extras."""

    id: int
    name: str
    slug: str
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    locale: str
    translations: dict[str, str] = Field(default_factory=dict)
    menus: list[PublicMenuSummary] = Field(default_factory=list)


class PublicRestaurantMenu(BaseModel):
    """Restaurant header plus one full menu, the shape behind /r/{slug}."""

    restaurant: PublicRestaurant
    menu: PublicMenu
