"""
Slug reservation for restaurants and menus.

Restaurant slugs are unique across the platform (they are the public URL
path). Menu slugs are unique within their restaurant only.

Reservation is an atomic check-and-write: a pre-check gives a readable
error, then the write runs inside a SAVEPOINT so a unique-constraint
violation from a concurrent writer becomes SlugConflict and leaves nothing
behind.

Usage:
    policy = SlugPolicy(db)
    slug = policy.reserve(
        SlugScope.platform(),
        "La Parrilla del Sur",
        lambda slug: _add_restaurant(slug),
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Menu, Restaurant
from shared.config.logging import get_logger
from shared.utils.exceptions import SlugConflict
from shared.utils.slugs import normalize_slug, suffixed

logger = get_logger(__name__)


class OnConflict(str, Enum):
    """What to do when the candidate slug is taken."""

    FAIL = "fail"
    SUFFIX = "suffix"  # try base-1, base-2, ...


@dataclass(frozen=True)
class SlugScope:
    """Uniqueness domain of a slug."""

    kind: str
    restaurant_id: int | None = None

    @classmethod
    def platform(cls) -> "SlugScope":
        return cls("platform")

    @classmethod
    def restaurant(cls, restaurant_id: int) -> "SlugScope":
        return cls("restaurant", restaurant_id)

    @property
    def label(self) -> str:
        if self.kind == "platform":
            return "plataforma"
        return f"restaurante {self.restaurant_id}"


class SlugPolicy:
    """Validates and reserves slugs within a scope."""

    MAX_SUFFIX_ATTEMPTS = 100

    def __init__(self, db: Session):
        self._db = db

    def is_taken(self, scope: SlugScope, slug: str, exclude_id: int | None = None) -> bool:
        """True when another row of the scope already holds the slug. Inactive rows count."""
        if scope.kind == "platform":
            criteria = [Restaurant.slug == slug]
            if exclude_id is not None:
                criteria.append(Restaurant.id != exclude_id)
        else:
            criteria = [Menu.restaurant_id == scope.restaurant_id, Menu.slug == slug]
            if exclude_id is not None:
                criteria.append(Menu.id != exclude_id)
        return bool(self._db.scalar(select(exists().where(*criteria))))

    def reserve(
        self,
        scope: SlugScope,
        candidate: str,
        insert: Callable[[str], object],
        on_conflict: OnConflict = OnConflict.FAIL,
        *,
        exclude_id: int | None = None,
    ) -> str:
        """
        Normalize the candidate and write it through `insert`.

        `insert` receives the final slug and adds (or updates) the owning
        row. It is flushed inside a savepoint.

        Raises:
            ValidationError: if the candidate normalizes to nothing.
            SlugConflict: if the slug is taken and on_conflict is FAIL,
                or no free suffix was found.
        """
        base = normalize_slug(candidate)

        for attempt in range(self.MAX_SUFFIX_ATTEMPTS):
            slug = base if attempt == 0 else suffixed(base, attempt)

            if self.is_taken(scope, slug, exclude_id):
                if on_conflict is OnConflict.FAIL:
                    raise SlugConflict(slug, scope.label, candidate=candidate)
                continue

            try:
                with self._db.begin_nested():
                    insert(slug)
                    self._db.flush()
            except IntegrityError:
                # Lost a race, or a different constraint failed
                if not self.is_taken(scope, slug, exclude_id):
                    raise
                if on_conflict is OnConflict.FAIL:
                    raise SlugConflict(slug, scope.label, candidate=candidate, race=True)
                continue

            if slug != base:
                logger.info("Slug suffixed", requested=base, reserved=slug, scope=scope.label)
            return slug

        raise SlugConflict(base, scope.label, attempts=self.MAX_SUFFIX_ATTEMPTS)
