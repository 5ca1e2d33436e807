"""
User Service.

Handles administrative identities:
- SUPER_ADMIN users live at platform level (tenant_id is NULL)
- ADMIN, MANAGER and EDITOR users belong to exactly one tenant
- The same email may exist once at platform level and once per tenant

Passwords are bcrypt-hashed before storage and never logged.

Usage:
    from rest_api.services.domain import UserService

    service = UserService(db)
    admin = service.create_platform_admin("root@menuqr.com", "S3cret-pass")
    editor = service.create(email="ed@demo.com", password="...", role=Roles.EDITOR, tenant_id=1)
"""

from __future__ import annotations

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Tenant, User
from rest_api.services.base_service import BaseService
from rest_api.services.crud.repository import BaseRepository
from shared.config.constants import Roles
from shared.config.logging import get_logger, mask_email
from shared.config.settings import get_settings
from shared.security.password import hash_password
from shared.utils.exceptions import DuplicateIdentity, NotFoundError, ValidationError

logger = get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    """
    Validate and lowercase an email address.

    Raises:
        ValidationError: If the address is malformed.
    """
    try:
        return _email_adapter.validate_python((email or "").strip()).lower()
    except PydanticValidationError as e:
        raise ValidationError("Email inválido", field="email") from e


def validate_password(password: str) -> None:
    """
    Raises:
        ValidationError: If the password is shorter than the configured minimum.
    """
    min_length = get_settings().password_min_length
    if not password or len(password) < min_length:
        raise ValidationError(
            f"La contraseña debe tener al menos {min_length} caracteres",
            field="password",
        )


class UserService(BaseService[User]):
    """
    Service for administrative users.

    Business rules:
    - role ∈ Roles.ALL
    - SUPER_ADMIN ⇔ tenant_id is None
    - (email, tenant_id) unique, platform level included
    """

    def __init__(self, db: Session):
        super().__init__(db, User, repository=BaseRepository)

    def find_by_email(self, email: str, tenant_id: int | None) -> User | None:
        """Find a user by email in a tenant, or at platform level when tenant_id is None."""
        scope = User.tenant_id.is_(None) if tenant_id is None else User.tenant_id == tenant_id
        return self._repo.find_one(User.email == email.strip().lower(), scope)

    def create(
        self,
        *,
        email: str,
        password: str,
        role: str,
        tenant_id: int | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        email_verified: bool = False,
        user_id: int | None = None,
        user_email: str | None = None,
    ) -> User:
        """
        Create a user (flushed, not committed).

        Raises:
            ValidationError: Bad role, role/tenant combination, email or password.
            NotFoundError: If the tenant does not exist.
            DuplicateIdentity: If the email is taken in that scope.
        """
        if role not in Roles.ALL:
            raise ValidationError(f"Rol inválido: {role}", field="role")
        if role == Roles.SUPER_ADMIN and tenant_id is not None:
            raise ValidationError("Un SUPER_ADMIN no puede pertenecer a un tenant", field="tenant_id")
        if role != Roles.SUPER_ADMIN and tenant_id is None:
            raise ValidationError(f"El rol {role} requiere un tenant", field="tenant_id")

        email = normalize_email(email)
        validate_password(password)

        if tenant_id is not None and self._db.get(Tenant, tenant_id) is None:
            raise NotFoundError("Tenant", tenant_id)

        if self.find_by_email(email, tenant_id) is not None:
            raise DuplicateIdentity("Usuario", email, tenant_id=tenant_id)

        user = User(
            tenant_id=tenant_id,
            email=email,
            password_hash=hash_password(password),
            role=role,
            first_name=first_name,
            last_name=last_name,
            email_verified=email_verified,
        )
        user.set_created_by(user_id, user_email)

        try:
            with self._db.begin_nested():
                self._db.add(user)
                self._db.flush()
        except IntegrityError as e:
            raise DuplicateIdentity("Usuario", email, tenant_id=tenant_id) from e

        logger.info(
            "Usuario creado",
            user_id=user.id,
            email=mask_email(email),
            role=role,
            tenant_id=tenant_id,
        )
        return user

    def create_platform_admin(
        self,
        email: str,
        password: str,
        first_name: str | None = "Admin",
        last_name: str | None = "Sistema",
    ) -> User:
        """Create the platform-level SUPER_ADMIN (no tenant)."""
        return self.create(
            email=email,
            password=password,
            role=Roles.SUPER_ADMIN,
            tenant_id=None,
            first_name=first_name,
            last_name=last_name,
            email_verified=True,
        )

    def deactivate(self, user_id: int, actor_id: int | None = None, actor_email: str | None = None) -> User:
        user = self._repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuario", user_id)
        user.soft_delete(actor_id, actor_email)
        self._flush("desactivar usuario", user_id=user_id)
        return user
