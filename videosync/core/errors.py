"""
➡️ But : Taxonomie des erreurs du moteur de réconciliation.

Chaque erreur porte son code HTTP et un libellé court ; un handler unique (main.py)
les transforme en réponse JSON {"error": ..., "message": ...}.

MalformedEventError → 400, jamais retentée

SignatureError → 401, jamais retentée

RecordLookupError (VideoNotFoundError 404, VideoIntegrityError 409) → problème de données, jamais retentée

RemotePlatformError → 502, transitoire côté plateforme

ProcessingFailedError, ReconciliationFailedError → 500, retries épuisés

RetryNotAllowedError → 409, relance demandée sur une vidéo qui n'est pas en erreur

TransitionConflictError → 409, la ligne a changé de statut à chaque tentative d.écriture (transitoire)
"""

from typing import Optional


class ServiceError(Exception):
    status_code: int = 500
    error: str = "Internal error"

    def __init__(self, message: str, *, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_body(self) -> dict:
        return {"error": self.error, "message": self.message}


class MalformedEventError(ServiceError):
    status_code = 400
    error = "Invalid JSON payload"


class SignatureError(ServiceError):
    status_code = 401
    error = "Invalid signature"


class RecordLookupError(ServiceError):
    """Aucune ou plusieurs lignes pour un identifiant : problème d'intégrité, pas transitoire."""


class VideoNotFoundError(RecordLookupError):
    status_code = 404
    error = "Video not found"


class VideoIntegrityError(RecordLookupError):
    status_code = 409
    error = "Ambiguous video record"


class MissingRemoteAssetError(ServiceError):
    status_code = 400
    error = "No remote asset id"


class RemotePlatformError(ServiceError):
    status_code = 502
    error = "Streaming platform error"

    def __init__(self, message: str, *, http_status: Optional[int] = None):
        super().__init__(message)
        self.http_status = http_status


class ProcessingFailedError(ServiceError):
    status_code = 500
    error = "Webhook processing failed"


class RetryNotAllowedError(ServiceError):
    status_code = 409
    error = "Retry not allowed"


class ReconciliationFailedError(ServiceError):
    status_code = 500
    error = "Reconciliation failed"


class TransitionConflictError(ServiceError):
    status_code = 409
    error = "Concurrent update"
