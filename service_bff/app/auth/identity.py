"""
Bearer-token identity verification for the BFF gateway.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from jose import JWTError, jwt

from shared.errors import AuthenticationError
from shared.logging import get_logger

# Exact-match paths that skip identity verification.
OPEN_PATHS = frozenset({"/healthz", "/readyz", "/auth/login"})

DEFAULT_TENANT_ID = "default"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity derived from a verified JWT."""

    subject: Optional[str]
    user_id: Optional[str]
    org_id: Optional[str] = None
    business_ids: Tuple[str, ...] = ()
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Principal":
        scopes = claims.get("scopes")
        if not isinstance(scopes, dict):
            scopes = {}

        org_id = scopes.get("orgId")
        businesses = scopes.get("businesses")
        if not isinstance(businesses, list):
            businesses = []

        subject = claims.get("sub")
        user_id = claims.get("id", subject)
        return cls(
            subject=subject if isinstance(subject, str) else None,
            user_id=str(user_id) if user_id is not None else None,
            org_id=str(org_id) if org_id else None,
            business_ids=tuple(str(item) if item else "" for item in businesses),
            claims=dict(claims),
        )

    @property
    def tenant_id(self) -> str:
        """Partition key: organization, else the first business when set, else the default tenant."""
        if self.org_id:
            return self.org_id
        if self.business_ids and self.business_ids[0]:
            return self.business_ids[0]
        return DEFAULT_TENANT_ID


def is_open_path(path: str) -> bool:
    return path in OPEN_PATHS


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a ``Bearer`` header, or None when absent."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    return token or None


class IdentityVerifier:
    """Verifies HMAC-signed bearer tokens against the configured secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", audience: Optional[str] = None):
        if not secret:
            raise ValueError("A JWT signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.audience = audience
        self.logger = get_logger("bff.auth.identity")

    def verify(self, authorization: Optional[str]) -> Principal:
        """Authenticate an ``Authorization`` header value."""
        token = extract_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("Missing token")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as exc:
            self.logger.warning("JWT validation failed", error=str(exc))
            raise AuthenticationError("Invalid token", details={"error": str(exc)}) from exc

        return Principal.from_claims(claims)
