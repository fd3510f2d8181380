"""
➡️ But : Tracer chaque événement reçu dans le journal d'audit (webhooklog).

Une ligne par événement, succès ou échec, même quand l'événement est illisible
(on garde ce qu'on peut : eventId, eventType, uid du payload brut).

Un échec d'écriture de l'audit est loggé mais ne change jamais la réponse HTTP.
"""

import logging
from typing import Any, Optional

from videosync.db.models.webhook_logs import WebhookLog
from videosync.db.repositories.webhook_logs import WebhookLogRepository
from videosync.features.webhooks.schemas import RemoteEvent

logger = logging.getLogger(__name__)


def _salvage(payload: Any, key: str) -> Optional[str]:
    if isinstance(payload, dict) and payload.get(key) is not None:
        return str(payload[key])
    return None


class AuditLogger:
    def __init__(self, repo: WebhookLogRepository, *, source: str = "stream"):
        self.repo = repo
        self.source = source

    def record(
        self,
        *,
        success: bool,
        event: Optional[RemoteEvent] = None,
        payload: Any = None,
        error: Optional[str] = None,
    ) -> Optional[WebhookLog]:
        if event is not None:
            event_id, event_type, video_uid = event.event_id, event.raw_event_type, event.uid
        else:
            event_id = _salvage(payload, "eventId")
            event_type = _salvage(payload, "eventType")
            video_uid = _salvage(payload, "uid")

        try:
            return self.repo.append(
                webhook_source=self.source,
                event_id=event_id,
                event_type=event_type,
                video_uid=video_uid,
                success=success,
                error_message=error,
                event_data=payload,
            )
        except Exception:
            logger.exception("Failed to write webhook audit entry (event %s, video %s)", event_id, video_uid)
            return None
