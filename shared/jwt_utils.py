"""
Admin bearer-token verification.

Tokens are issued by the external auth service. This module only verifies
them with PyJWT: RS256 when a public key is configured, HS256 with the
shared secret otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import jwt

from config import JWTSettings


@dataclass(frozen=True)
class AdminIdentity:
    user_id: str
    role: str
    email: Optional[str] = None


def _verification_key(settings: JWTSettings) -> tuple[str, str]:
    if settings.use_rs256:
        # Support keys provided via env with literal \n sequences
        return settings.jwt_public_key.replace("\\n", "\n"), "RS256"
    if not settings.jwt_secret:
        raise jwt.InvalidTokenError("JWT verification key is not configured")
    return settings.jwt_secret, "HS256"


def verify_access_jwt(token: str, settings: JWTSettings) -> dict[str, Any]:
    """Decode and verify *token*; raises ``jwt.InvalidTokenError`` on failure."""
    key, algorithm = _verification_key(settings)
    options = {"verify_aud": settings.jwt_audience is not None}
    kwargs: dict[str, Any] = {}
    if settings.jwt_audience is not None:
        kwargs["audience"] = settings.jwt_audience
    if settings.jwt_issuer is not None:
        kwargs["issuer"] = settings.jwt_issuer
    return jwt.decode(token, key, algorithms=[algorithm], options=options, **kwargs)


def claims_roles(claims: dict[str, Any]) -> list[str]:
    """Collect roles from either a ``role`` string or a ``roles`` list claim."""
    roles: list[str] = []
    role = claims.get("role")
    if isinstance(role, str):
        roles.append(role)
    extra = claims.get("roles")
    if isinstance(extra, list):
        roles.extend(str(r) for r in extra)
    return roles


def identity_from_claims(claims: dict[str, Any], admin_role: str) -> Optional[AdminIdentity]:
    """Return an AdminIdentity when the claims carry *admin_role*, else None."""
    if admin_role not in claims_roles(claims):
        return None
    user_id = str(claims.get("sub") or claims.get("id") or "")
    return AdminIdentity(user_id=user_id, role=admin_role, email=claims.get("email"))
