from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import jwt
from fastapi import Depends, Header, HTTPException, status

from shopapi.core.config import settings

logger = logging.getLogger(__name__)

_ROLE_ADMIN = settings.ROLE_ADMIN
NOT_AUTHORIZED = "Not Authorized Login Again"


@dataclass
class AuthContext:
    user: str
    email: Optional[str] = None
    roles: List[str] = field(default_factory=list)


def _roles_from_claims(payload: Dict[str, Any]) -> Set[str]:
    """Accepte `role` (str) et/ou `roles` (liste)."""
    roles: Set[str] = set()
    role = payload.get("role")
    if isinstance(role, str) and role:
        roles.add(role)
    for r in payload.get("roles") or []:
        if isinstance(r, str):
            roles.add(r)
    return roles


class _Verifier:
    """Vérifie les tokens signés avec le secret partagé."""

    def __init__(self, secret: str, algorithm: str):
        if not secret:
            raise RuntimeError("JWT_SECRET must be configured")
        if not algorithm:
            raise RuntimeError("JWT_ALGORITHM must be configured")
        self.secret = secret
        self.algorithm = algorithm

    def decode(self, token: str) -> Dict[str, Any]:
        return jwt.decode(token, self.secret, algorithms=[self.algorithm])


_verifier: Optional[_Verifier] = None


def _get_verifier() -> _Verifier:
    global _verifier
    if _verifier is None:
        _verifier = _Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


def _unauthorized() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHORIZED)


def require_user(token: Optional[str] = Header(None)) -> AuthContext:
    """
    Lit le header brut `token` (pas de préfixe Bearer) et retourne le contexte.
    401 si absent, invalide ou sans identité.
    """
    if not token:
        logger.info("request without token")
        raise _unauthorized()

    try:
        payload = _get_verifier().decode(token)
    except jwt.PyJWTError as e:
        logger.warning("JWT invalid: %s", e)
        raise _unauthorized()

    user = payload.get("id") or payload.get("sub")
    if not user:
        logger.warning("JWT without identity claim")
        raise _unauthorized()

    return AuthContext(
        user=str(user),
        email=payload.get("email"),
        roles=sorted(_roles_from_claims(payload)),
    )


def require_admin(auth: AuthContext = Depends(require_user)) -> AuthContext:
    if _ROLE_ADMIN not in auth.roles:
        logger.warning("admin role missing", extra={"user": auth.user})
        raise _unauthorized()
    return auth
