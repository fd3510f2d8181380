"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_webhook_service() : crée un WebhookService à partir d'une session DB.

require_permission("content.write") : garde d'autorisation des routes d'admin.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à surcharger dans les tests (app.dependency_overrides).
"""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from videosync.core.config import (
    settings,
    jwt_settings,
    retry_policy,
    signature_settings,
    stream_settings,
)
from videosync.db.session import get_session

from videosync.db.repositories.videos import VideoRepository
from videosync.db.repositories.webhook_logs import WebhookLogRepository
from videosync.db.repositories.profiles import ProfileRepository
from videosync.db.repositories.notifications import NotificationRepository

from videosync.features.processing.notifier import Notifier
from videosync.features.processing.retry import RetryingExecutor
from videosync.features.processing.services import ReconciliationService
from videosync.features.webhooks.audit import AuditLogger
from videosync.features.webhooks.services import WebhookService
from videosync.features.webhooks.signatures import SignatureVerifier

from videosync.security.access import Denied, Principal, authorize
from videosync.utils.stream import StreamClient


# -----------------------------
# Repositories
# -----------------------------
def get_video_repository(session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(session)

def get_webhook_log_repository(session: Session = Depends(get_session)) -> WebhookLogRepository:
    return WebhookLogRepository(session)

def get_profile_repository(session: Session = Depends(get_session)) -> ProfileRepository:
    return ProfileRepository(session)

def get_notification_repository(session: Session = Depends(get_session)) -> NotificationRepository:
    return NotificationRepository(session)


# -----------------------------
# Collaborateurs sans état
# -----------------------------
def get_retrying_executor() -> RetryingExecutor:
    return RetryingExecutor(retry_policy)

def get_signature_verifier() -> SignatureVerifier:
    return SignatureVerifier(signature_settings)

def get_stream_client() -> StreamClient:
    return StreamClient(stream_settings)


# -----------------------------
# Services
# -----------------------------
def get_notifier(
    profile_repo: ProfileRepository = Depends(get_profile_repository),
    notification_repo: NotificationRepository = Depends(get_notification_repository),
) -> Notifier:
    return Notifier(profile_repo=profile_repo, notification_repo=notification_repo)

def get_webhook_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    log_repo: WebhookLogRepository = Depends(get_webhook_log_repository),
    notifier: Notifier = Depends(get_notifier),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    executor: RetryingExecutor = Depends(get_retrying_executor),
) -> WebhookService:
    return WebhookService(
        verifier=verifier,
        video_repo=video_repo,
        notifier=notifier,
        audit=AuditLogger(log_repo),
        executor=executor,
        audit_empty_body=settings.WEBHOOK_AUDIT_EMPTY_BODY,
    )

def get_reconciliation_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    notifier: Notifier = Depends(get_notifier),
    stream: StreamClient = Depends(get_stream_client),
    executor: RetryingExecutor = Depends(get_retrying_executor),
) -> ReconciliationService:
    return ReconciliationService(
        video_repo=video_repo,
        stream=stream,
        notifier=notifier,
        executor=executor,
        concurrency=settings.SWEEP_CONCURRENCY,
    )

def build_reconciliation_service(session: Session, stream: Optional[StreamClient] = None) -> ReconciliationService:
    """Même assemblage que get_reconciliation_service, hors requête (sweep périodique, scripts)."""
    return ReconciliationService(
        video_repo=VideoRepository(session),
        stream=stream or StreamClient(stream_settings),
        notifier=Notifier(
            profile_repo=ProfileRepository(session),
            notification_repo=NotificationRepository(session),
        ),
        executor=RetryingExecutor(retry_policy),
        concurrency=settings.SWEEP_CONCURRENCY,
    )


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token_from_bearer(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[str]:
    if not credentials or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials


def require_permission(permission: str) -> Callable[..., Principal]:
    """
    Dépendance paramétrée :
        principal: Principal = Depends(require_permission("content.write"))
    """
    def _guard(access_token: Optional[str] = Depends(get_access_token_from_bearer)) -> Principal:
        result = authorize(access_token, permission, jwt_settings)
        if isinstance(result, Denied):
            raise HTTPException(status_code=result.status_code, detail=result.reason)
        return result.principal

    return _guard
