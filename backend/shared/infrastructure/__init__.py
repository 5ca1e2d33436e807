"""
Infrastructure module: database sessions and outbound collaborators.

Provides:
- Database sessions and transactions (db.py)
- Request correlation ids (correlation.py)
- QR encoding (qr_encoder.py)
- Country detection (geo.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    session_scope,
    unit_of_work,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "session_scope",
    "unit_of_work",
]
