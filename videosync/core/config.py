"""
➡️ But : Centraliser tous les paramètres configurables (secret webhook, politique de retry,
accès à la plateforme de streaming, planification du sweep, DB, JWT...).

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

Fournit un objet settings unique, ainsi que des objets de configuration figés
(RetryPolicy, SignatureSettings, StreamSettings, JWTSettings) que l'on passe aux
constructeurs des services :

from videosync.core.config import settings, retry_policy
executor = RetryingExecutor(retry_policy)

🔹 Avantages :

Aucune lecture d'os.environ dans la logique métier.

Facilite le passage entre environnements (dev / prod / test).
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from pydantic_settings import BaseSettings
from videosync.security.tokens import JWTSettings


@dataclass(frozen=True)
class RetryPolicy:
    """
    Politique de backoff exponentiel borné.

    Délai avant la tentative k (k >= 1) : min(initial_delay * multiplier**(k-1), max_delay).
    Nombre total de tentatives : max_retries + 1.
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 10.0


@dataclass(frozen=True)
class SignatureSettings:
    """
    - `secret` : secret partagé avec la plateforme (None = non provisionné)
    - `require_secret` : True = on refuse tout événement si le secret manque (fail closed)
    """
    secret: Optional[str] = None
    require_secret: bool = False


@dataclass(frozen=True)
class StreamSettings:
    account_id: str
    api_token: str
    api_base: str = "https://api.cloudflare.com/client/v4"
    customer_subdomain: Optional[str] = None
    timeout: float = 10.0


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "videosync"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: str = "INFO"

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "videosync.db"
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # Webhook
    # -----------------------------
    STREAM_WEBHOOK_SECRET: Optional[str] = None
    WEBHOOK_REQUIRE_SECRET: bool = False   # ⚠️ à passer à True en prod une fois le secret provisionné
    WEBHOOK_AUDIT_EMPTY_BODY: bool = True

    # -----------------------------
    # Retry
    # -----------------------------
    RETRY_MAX_RETRIES: int = 3
    RETRY_INITIAL_DELAY: float = 1.0       # secondes
    RETRY_MULTIPLIER: float = 2.0
    RETRY_MAX_DELAY: float = 10.0          # secondes

    # -----------------------------
    # Sweep (réconciliation)
    # -----------------------------
    SWEEP_INTERVAL_SECONDS: int = 0        # 0 = pas de sweep périodique
    SWEEP_CONCURRENCY: int = 1             # 1 = séquentiel

    # -----------------------------
    # Plateforme de streaming
    # -----------------------------
    STREAM_ACCOUNT_ID: str = ""
    STREAM_API_TOKEN: str = ""
    STREAM_API_BASE: str = "https://api.cloudflare.com/client/v4"
    STREAM_CUSTOMER_SUBDOMAIN: Optional[str] = None
    STREAM_TIMEOUT_SECONDS: float = 10.0

    # -----------------------------
    # JWT / Auth (jetons émis par le fournisseur d'identité)
    # -----------------------------
    JWT_SECRET_KEY: str = "CHANGE_ME"     # ⚠️ change en prod
    JWT_ISSUER: str = "videosync"
    JWT_ALGORITHM: str = "HS256"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")


# Instance globale importable partout
settings = Settings()

retry_policy = RetryPolicy(
    max_retries=settings.RETRY_MAX_RETRIES,
    initial_delay=settings.RETRY_INITIAL_DELAY,
    multiplier=settings.RETRY_MULTIPLIER,
    max_delay=settings.RETRY_MAX_DELAY,
)

signature_settings = SignatureSettings(
    secret=settings.STREAM_WEBHOOK_SECRET or None,
    require_secret=settings.WEBHOOK_REQUIRE_SECRET,
)

stream_settings = StreamSettings(
    account_id=settings.STREAM_ACCOUNT_ID,
    api_token=settings.STREAM_API_TOKEN,
    api_base=settings.STREAM_API_BASE,
    customer_subdomain=settings.STREAM_CUSTOMER_SUBDOMAIN,
    timeout=settings.STREAM_TIMEOUT_SECONDS,
)

# Objet JWT prêt à l'emploi pour la garde d'autorisation
jwt_settings = JWTSettings(
    secret=settings.JWT_SECRET_KEY,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=15),
)
