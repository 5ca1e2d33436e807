"""
Provisioning blueprints.

A blueprint is a declarative description of a tenant graph. It is parsed
and validated by pydantic before any write happens, so malformed input never
reaches the store.

Usage:
    blueprint = TenantBlueprint.model_validate_json(path.read_text())
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, field_validator, model_validator

from shared.utils.schemas import MenuStatusLiteral, TenantStatusLiteral

TenantRole = Literal["ADMIN", "MANAGER", "EDITOR"]
PlanLiteral = Literal["free", "pro", "premium"]

# locale -> {key: value}
Translations = dict[str, dict[str, str]]


class _Blueprint(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# =============================================================================
# Catalog
# =============================================================================


class PriceBlueprint(_Blueprint):
    label: str = Field(min_length=1, max_length=50)
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")  # restaurant default when None


class ItemBlueprint(_Blueprint):
    name: str = Field(min_length=1)
    description: str | None = None
    prices: list[PriceBlueprint] = Field(min_length=1)
    icons: list[str] = Field(default_factory=list)  # icon codes
    translations: Translations = Field(default_factory=dict)

    @field_validator("prices")
    @classmethod
    def unique_labels(cls, prices: list[PriceBlueprint]) -> list[PriceBlueprint]:
        labels = [p.label for p in prices]
        if len(labels) != len(set(labels)):
            raise ValueError("price labels must be unique per item")
        return prices


class SectionBlueprint(_Blueprint):
    name: str = Field(min_length=1)
    items: list[ItemBlueprint] = Field(default_factory=list)
    translations: Translations = Field(default_factory=dict)


class MenuBlueprint(_Blueprint):
    name: str = Field(min_length=1)
    slug: str | None = None  # derived from the name when omitted
    description: str | None = None
    status: MenuStatusLiteral = "DRAFT"
    sections: list[SectionBlueprint] = Field(default_factory=list)
    translations: Translations = Field(default_factory=dict)


class RestaurantBlueprint(_Blueprint):
    name: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None
    address: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    website: str | None = None
    timezone: str | None = None  # tenant setting when None
    default_currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    menus: list[MenuBlueprint] = Field(default_factory=list)
    translations: Translations = Field(default_factory=dict)


# =============================================================================
# Identity
# =============================================================================


class UserBlueprint(_Blueprint):
    email: EmailStr
    password: SecretStr
    role: TenantRole = "ADMIN"
    first_name: str | None = None
    last_name: str | None = None


class PlatformAdminBlueprint(_Blueprint):
    """The SUPER_ADMIN account. It never belongs to a tenant."""

    email: EmailStr
    password: SecretStr
    first_name: str | None = "Admin"
    last_name: str | None = "Sistema"


class TenantBlueprint(_Blueprint):
    """
    A full tenant graph: tenant, users, restaurants and their menus.

    Audit entries are attributed to `actor_email` (one of `users`), or to
    the first ADMIN when omitted.
    """

    name: str = Field(min_length=1)
    plan: PlanLiteral = "free"
    status: TenantStatusLiteral = "active"
    settings: dict[str, str] = Field(default_factory=dict)
    users: list[UserBlueprint] = Field(default_factory=list)
    restaurants: list[RestaurantBlueprint] = Field(default_factory=list)
    actor_email: EmailStr | None = None
    ensure_default_icons: bool = True

    @model_validator(mode="after")
    def check_references(self) -> "TenantBlueprint":
        emails = [u.email.lower() for u in self.users]
        if len(emails) != len(set(emails)):
            raise ValueError("user emails must be unique within the tenant")
        if self.actor_email and self.actor_email.lower() not in emails:
            raise ValueError("actor_email must be one of the tenant users")
        return self
