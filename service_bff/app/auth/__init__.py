"""
Authentication helpers for the BFF gateway.
"""

from .identity import (
    DEFAULT_TENANT_ID,
    OPEN_PATHS,
    IdentityVerifier,
    Principal,
    extract_bearer_token,
    is_open_path,
)

__all__ = [
    "DEFAULT_TENANT_ID",
    "OPEN_PATHS",
    "IdentityVerifier",
    "Principal",
    "extract_bearer_token",
    "is_open_path",
]
