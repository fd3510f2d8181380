import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypedDict

from jose import jwt, JWTError

# ==========================================================
# 🔧 Configuration : paramètres de génération/validation JWT
# ==========================================================

@dataclass(frozen=True)
class JWTSettings:
    """
    Configuration des tokens JWT.

    - `secret` : clé secrète pour signer/valider les tokens
    - `issuer` : émetteur attendu (claim `iss`)
    - `algorithm` : algo de signature (HS256 recommandé)
    - `access_ttl` : durée de vie d'un access token
    """
    secret: str
    issuer: str = "videosync"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)


# ==========================================================
# 🧱 Types
# ==========================================================

class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # identifiant du profil
    email: str
    role: str           # admin_role du profil (super_admin, content_admin, ...)
    typ: str            # "access"
    jti: str
    iat: int
    exp: int


# ==========================================================
# 🧩 Fonctions utilitaires
# ==========================================================

def _now() -> datetime:
    """Renvoie l'heure UTC actuelle."""
    return datetime.now(timezone.utc)

def new_jti() -> str:
    """Crée un identifiant unique pour un token."""
    return str(uuid.uuid4())


# ==========================================================
# 🎟️ Génération (outillage dev / tests)
# ==========================================================

def create_access_token(*, subject: str, role: str, settings: JWTSettings, email: str = "") -> str:
    """
    Crée un access token JWT court.
    En production les tokens sont émis par le fournisseur d'identité ; cette fonction
    sert au seed et aux tests.
    """
    now = _now()
    payload: DecodedToken = {
        "iss": settings.issuer,
        "sub": subject,
        "email": email,
        "role": role,
        "typ": "access",
        "jti": new_jti(),
        "iat": int(now.timestamp()),
        "exp": int((now + settings.access_ttl).timestamp()),
    }
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


# ==========================================================
# 🔍 Décodage / Validation
# ==========================================================

def decode_token(token: str, settings: JWTSettings) -> DecodedToken:
    """
    Décode et valide un token JWT (signature + expiration + émetteur).
    Lève JWTError en cas de signature invalide ou expirée.
    """
    decoded = jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        options={"verify_aud": False},
    )
    return decoded  # type: ignore[return-value]


__all__ = ["JWTSettings", "DecodedToken", "JWTError", "create_access_token", "decode_token", "new_jti"]
