"""
Provisioning Orchestrator.

Builds a consistent tenant graph from a blueprint, top-down:

    1. Tenant (default settings merged with the blueprint's)
    2. Users (passwords hashed before they reach the store)
    3. Restaurants (slug reserved platform-wide)
    4. Menus (slug reserved per restaurant, initial status)
    5. Sections (sort_order 1..n in blueprint order)
    6. Items with their prices and icons (unknown icons -> warning)
    7. QR code of every published menu (non-fatal)
    8. Translations
    9. Audit entries for restaurants and menus (best-effort, by the services)

The whole run is one unit of work: any fatal error rolls everything back,
including the demo seed. Re-running a blueprint is not idempotent; the
first unique violation aborts it.

Usage:
    with session_scope() as db:
        result = ProvisioningOrchestrator(db).provision(blueprint)
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import Menu, Restaurant, User
from rest_api.services.domain import (
    IconCatalog,
    IconService,
    ItemService,
    MenuService,
    QRCodeService,
    RestaurantService,
    SectionService,
    TenantService,
    TranslationService,
    UserService,
)
from rest_api.services.provisioning.blueprints import (
    MenuBlueprint,
    PlatformAdminBlueprint,
    RestaurantBlueprint,
    TenantBlueprint,
    Translations,
)
from rest_api.services.provisioning.result import ProvisioningResult
from rest_api.services.provisioning.steps import FailurePolicy, StepRunner
from rest_api.services.slug_policy import OnConflict
from shared.config.constants import EntityType, MenuStatus, Roles
from shared.config.logging import mask_email, provisioning_logger as logger
from shared.infrastructure.correlation import correlation_scope
from shared.infrastructure.db import unit_of_work


class ProvisioningOrchestrator:
    """Creates tenant graphs and the platform admin inside one transaction."""

    def __init__(self, db: Session, *, qr_service: QRCodeService | None = None):
        self._db = db
        self._qr = qr_service or QRCodeService(db)

    # =========================================================================
    # Entry points
    # =========================================================================

    def provision(
        self,
        blueprint: TenantBlueprint,
        *,
        platform_admin: PlatformAdminBlueprint | None = None,
    ) -> ProvisioningResult:
        """
        Provision a tenant (and optionally the platform admin) atomically.

        Raises:
            AppException: Any fatal error. Nothing is committed.
        """
        result = ProvisioningResult()

        with correlation_scope(prefix="prov"), unit_of_work(self._db):
            logger.info("Provisioning started", tenant=blueprint.name)
            if platform_admin is not None:
                admin = self._create_platform_admin(platform_admin)
                result.platform_admin_id = admin.id
                result.counts["users"] += 1
            self._provision_tenant(blueprint, result)

        logger.info("Provisioning committed", **result.summary())
        return result

    def bootstrap_platform_admin(self, blueprint: PlatformAdminBlueprint) -> User:
        """
        Create the SUPER_ADMIN account.

        Raises:
            DuplicateIdentity: If a platform-level user already has the email.
        """
        with unit_of_work(self._db):
            return self._create_platform_admin(blueprint)

    # =========================================================================
    # Steps
    # =========================================================================

    def _create_platform_admin(self, blueprint: PlatformAdminBlueprint) -> User:
        user = UserService(self._db).create_platform_admin(
            email=blueprint.email,
            password=blueprint.password.get_secret_value(),
            first_name=blueprint.first_name,
            last_name=blueprint.last_name,
        )
        logger.info("Platform admin created", user_id=user.id, email=mask_email(user.email))
        return user

    def _provision_tenant(self, blueprint: TenantBlueprint, result: ProvisioningResult) -> None:
        run = StepRunner(self._db, result)

        # 1. Tenant
        tenant = TenantService(self._db).create(
            blueprint.name,
            plan=blueprint.plan,
            settings=blueprint.settings,
            status=blueprint.status,
        )
        result.tenant_id = tenant.id
        result.counts["tenants"] += 1

        # 2. Users
        users = UserService(self._db)
        actor: User | None = None
        for bp in blueprint.users:
            user = users.create(
                email=bp.email,
                password=bp.password.get_secret_value(),
                role=bp.role,
                tenant_id=tenant.id,
                first_name=bp.first_name,
                last_name=bp.last_name,
                email_verified=True,
            )
            result.user_ids[user.email] = user.id
            result.counts["users"] += 1

            if blueprint.actor_email:
                if user.email == blueprint.actor_email.lower():
                    actor = user
            elif actor is None and user.role == Roles.ADMIN:
                actor = user

        actor_id = actor.id if actor else None
        actor_email = actor.email if actor else None

        # Icons are platform-wide; the catalog is read once for the whole run
        if blueprint.ensure_default_icons:
            IconService(self._db).ensure_catalog()
        catalog = IconCatalog.load(self._db)

        services = _TenantServices(self._db, self._qr, catalog)

        # 3..9 per restaurant
        for bp in blueprint.restaurants:
            self._provision_restaurant(bp, tenant.id, actor_id, actor_email, services, run, result)

    def _provision_restaurant(
        self,
        bp: RestaurantBlueprint,
        tenant_id: int,
        actor_id: int | None,
        actor_email: str | None,
        services: "_TenantServices",
        run: StepRunner,
        result: ProvisioningResult,
    ) -> Restaurant:
        data = bp.model_dump(exclude={"menus", "translations"}, exclude_none=True)
        restaurant = services.restaurants.create(data, tenant_id, actor_id, actor_email)
        result.restaurant_ids[restaurant.slug] = restaurant.id
        result.counts["restaurants"] += 1

        for menu_bp in bp.menus:
            menu = self._provision_menu(menu_bp, restaurant, actor_id, actor_email, services, run, result)
            self._translate(services, tenant_id, EntityType.MENU, menu.id, menu_bp.translations, actor_id, actor_email, result)

        self._translate(services, tenant_id, EntityType.RESTAURANT, restaurant.id, bp.translations, actor_id, actor_email, result)
        return restaurant

    def _provision_menu(
        self,
        bp: MenuBlueprint,
        restaurant: Restaurant,
        actor_id: int | None,
        actor_email: str | None,
        services: "_TenantServices",
        run: StepRunner,
        result: ProvisioningResult,
    ) -> Menu:
        tenant_id = restaurant.tenant_id
        menu = services.menus.create(
            {
                "restaurant_id": restaurant.id,
                "name": bp.name,
                "slug": bp.slug,
                "description": bp.description,
                "status": bp.status,
            },
            tenant_id,
            actor_id,
            actor_email,
        )
        result.menu_ids.append(menu.id)
        result.counts["menus"] += 1

        for position, section_bp in enumerate(bp.sections, start=1):
            section = services.sections.create(
                {"menu_id": menu.id, "name": section_bp.name, "sort_order": position},
                tenant_id,
                actor_id,
                actor_email,
            )
            result.counts["sections"] += 1
            self._translate(services, tenant_id, EntityType.SECTION, section.id, section_bp.translations, actor_id, actor_email, result)

            for item_bp in section_bp.items:
                created = services.items.create_item(
                    {
                        "menu_id": menu.id,
                        "section_id": section.id,
                        "name": item_bp.name,
                        "description": item_bp.description,
                    },
                    tenant_id,
                    actor_id,
                    actor_email,
                    prices=[p.model_dump() for p in item_bp.prices],
                    icon_codes=item_bp.icons,
                )
                result.counts["items"] += 1
                result.counts["prices"] += len(item_bp.prices)
                for code in created.skipped_icon_codes:
                    result.warn(f"Ícono desconocido '{code}' omitido en '{item_bp.name}'")
                self._translate(services, tenant_id, EntityType.ITEM, created.item.id, item_bp.translations, actor_id, actor_email, result)

        if menu.status == MenuStatus.PUBLISHED:
            qr = run(f"QR del menú '{menu.slug}'", lambda: self._qr.generate(menu.id), FailurePolicy.WARN)
            if qr is not None:
                result.counts["qr_codes"] += 1

        return menu

    def _translate(
        self,
        services: "_TenantServices",
        tenant_id: int,
        entity_type: str,
        entity_id: int,
        translations: Translations,
        actor_id: int | None,
        actor_email: str | None,
        result: ProvisioningResult,
    ) -> None:
        for locale, values in translations.items():
            saved = services.translations.save_many(
                tenant_id,
                locale=locale,
                entity_type=entity_type,
                entity_id=entity_id,
                values=values,
                user_id=actor_id,
                user_email=actor_email,
            )
            result.counts["translations"] += len(saved)


class _TenantServices:
    """Services shared by every step of one run."""

    def __init__(self, db: Session, qr: QRCodeService, catalog: IconCatalog):
        self.restaurants = RestaurantService(db, on_slug_conflict=OnConflict.FAIL, qr_service=qr)
        self.menus = MenuService(db, on_slug_conflict=OnConflict.FAIL, qr_service=qr)
        self.sections = SectionService(db)
        self.items = ItemService(db, icon_catalog=catalog)
        self.translations = TranslationService(db)
