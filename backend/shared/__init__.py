"""
Shared module for common utilities used by the REST API and the CLI.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging, mask_email
  - constants.py: Roles, TenantStatus, MenuStatus, AuditAction, EntityType

- shared.infrastructure: Database and collaborators
  - db.py: SQLAlchemy sessions, session_scope(), unit_of_work()
  - correlation.py: Request correlation ids
  - qr_encoder.py: QR image encoding
  - geo.py: Country detection

- shared.security: Password hashing (bcrypt)

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - slugs.py: Slug normalization

IMPORT EXAMPLES:
    from shared.infrastructure.db import session_scope, unit_of_work
    from shared.config.settings import settings
    from shared.config.constants import Roles, MenuStatus
    from shared.utils.exceptions import NotFoundError, SlugConflict
"""
