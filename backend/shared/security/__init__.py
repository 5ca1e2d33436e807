"""
Security module: password hashing.
"""

from shared.security.password import hash_password, verify_password

__all__ = [
    "hash_password",
    "verify_password",
]
