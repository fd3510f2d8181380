"""
➡️ But : Garde d'autorisation des routes d'administration (sync, retry...).

authorize(token, permission) renvoie un résultat typé :

Granted(principal) → l'appel est autorisé

Denied(status_code, reason) → 401 (token absent/invalide) ou 403 (rôle insuffisant)

🔹 Avantages :

Pas de "soit un user, soit une erreur" vérifié à la main dans chaque route.

Testable sans FastAPI.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from videosync.security.tokens import JWTError, JWTSettings, decode_token

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "super_admin": frozenset({
        "admin.all",
        "content.read", "content.write", "content.delete",
        "users.read", "users.write", "users.delete",
        "analytics.read", "analytics.write",
        "support.read", "support.write",
    }),
    "content_admin": frozenset({"content.read", "content.write", "content.delete"}),
    "support_admin": frozenset({"users.read", "support.read", "support.write"}),
}

# Rôles destinataires des notifications de traitement vidéo
NOTIFIED_ROLES = ("super_admin", "content_admin")


@dataclass(frozen=True)
class Principal:
    subject: str
    role: str
    email: str = ""


@dataclass(frozen=True)
class Granted:
    principal: Principal


@dataclass(frozen=True)
class Denied:
    status_code: int
    reason: str


AuthResult = Union[Granted, Denied]


def has_permission(role: str, permission: str) -> bool:
    permissions = ROLE_PERMISSIONS.get(role, frozenset())
    return "admin.all" in permissions or permission in permissions


def authorize(token: Optional[str], permission: str, settings: JWTSettings) -> AuthResult:
    if not token:
        return Denied(401, "Authentication required")
    try:
        decoded = decode_token(token, settings)
    except JWTError:
        return Denied(401, "Invalid token")

    if decoded.get("typ") != "access" or not decoded.get("sub"):
        return Denied(401, "Invalid token")

    role = decoded.get("role")
    if not role:
        return Denied(403, "Admin role required")
    if not has_permission(role, permission):
        return Denied(403, "Insufficient permissions")

    return Granted(Principal(subject=decoded["sub"], role=role, email=decoded.get("email", "")))
