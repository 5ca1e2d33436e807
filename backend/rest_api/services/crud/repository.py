"""
Repository Pattern for database access.

Repositories only read and stage rows; they never flush or commit. The
tenant-scoped variant adds `tenant_id = :tenant` to every query so that a
service cannot read another tenant's catalog by accident.

Usage:
    from rest_api.services.crud.repository import BaseRepository, TenantRepository

    menu_repo = TenantRepository(Menu, db)
    menus = menu_repo.find_all(tenant_id, Menu.restaurant_id == 7, order_by=Menu.sort)
    menu = menu_repo.find_by_id(42, tenant_id)

    # Platform-wide entities (icons, tenants, platform users)
    icon_repo = BaseRepository(Icon, db)
    icon = icon_repo.find_one(Icon.code == "vegano")
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import exists as sql_exists, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from rest_api.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Queries over one model, honouring soft deletion through `is_active`."""

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session

    @property
    def model(self) -> type[ModelT]:
        return self._model

    def _active(self, query: Select, include_inactive: bool) -> Select:
        if not include_inactive and hasattr(self._model, "is_active"):
            query = query.where(self._model.is_active.is_(True))
        return query

    def _select(
        self,
        *criteria: Any,
        include_inactive: bool,
        options: list[Any] | None = None,
        order_by: Any | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Select:
        query = self._active(select(self._model).where(*criteria), include_inactive)
        if options:
            query = query.options(*options)
        if order_by is not None:
            query = query.order_by(order_by)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query

    def find_by_id(
        self,
        entity_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        query = self._select(self._model.id == entity_id, include_inactive=include_inactive, options=options)
        return self._session.scalar(query)

    def find_one(self, *criteria: Any, include_inactive: bool = True) -> ModelT | None:
        """First row matching the criteria. Inactive rows count unless excluded."""
        query = self._select(*criteria, include_inactive=include_inactive, limit=1)
        return self._session.scalars(query).first()

    def find_all(
        self,
        *criteria: Any,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        query = self._select(
            *criteria,
            include_inactive=include_inactive,
            options=options,
            order_by=order_by,
            limit=limit,
            offset=offset,
        )
        return self._session.scalars(query).all()

    def count(self, *criteria: Any, include_inactive: bool = False) -> int:
        query = self._active(select(func.count()).select_from(self._model).where(*criteria), include_inactive)
        return self._session.scalar(query) or 0

    def exists_where(self, *criteria: Any) -> bool:
        """True if any row (active or not) matches. Used for uniqueness checks."""
        return bool(self._session.scalar(select(sql_exists().where(*criteria))))


class TenantRepository(BaseRepository[ModelT]):
    """
    Repository with automatic multi-tenant isolation.

    The model must have a `tenant_id` column. A row of another tenant is
    reported as missing, never returned.
    """

    def __init__(self, model: type[ModelT], session: Session):
        if not hasattr(model, "tenant_id"):
            raise AttributeError(
                f"Model {model.__name__} does not have tenant_id column. Use BaseRepository instead."
            )
        super().__init__(model, session)

    def find_by_id(
        self,
        entity_id: int,
        tenant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        query = self._select(
            self._model.id == entity_id,
            self._model.tenant_id == tenant_id,
            include_inactive=include_inactive,
            options=options,
        )
        return self._session.scalar(query)

    def find_all(self, tenant_id: int, *criteria: Any, **kwargs: Any) -> Sequence[ModelT]:
        """
        Rows of one tenant, optionally narrowed by criteria.

        Usage:
            repo.find_all(tenant_id, MenuSection.menu_id == menu_id, order_by=MenuSection.sort_order)
        """
        return super().find_all(self._model.tenant_id == tenant_id, *criteria, **kwargs)

    def count(self, tenant_id: int, *criteria: Any, include_inactive: bool = False) -> int:
        return super().count(self._model.tenant_id == tenant_id, *criteria, include_inactive=include_inactive)

    def exists(self, entity_id: int, tenant_id: int) -> bool:
        return self.exists_where(self._model.id == entity_id, self._model.tenant_id == tenant_id)
