"""
➡️ But : Ingestion d'un événement webhook de la plateforme de streaming.

received → verified → mapped → applied → logged

Toute erreur avant "applied" : entrée d'audit success=False, aucune ligne Video modifiée.
Les erreurs sont des ServiceError typées ; la route ne fait que les laisser remonter.
"""

import json
import logging
from typing import Any, Optional, Tuple

from pydantic import ValidationError

from videosync.core.errors import MalformedEventError, ProcessingFailedError, RecordLookupError, SignatureError
from videosync.db.repositories.videos import VideoRepository
from videosync.domain.transitions import TransitionOutcome
from videosync.features.processing.mapper import map_event
from videosync.features.processing.notifier import Notifier
from videosync.features.processing.retry import RetryingExecutor
from videosync.features.webhooks.audit import AuditLogger
from videosync.features.webhooks.schemas import RemoteEvent, WebhookAck
from videosync.features.webhooks.signatures import SignatureCheck, SignatureVerifier

logger = logging.getLogger(__name__)


class WebhookService:
    def __init__(
        self,
        *,
        verifier: SignatureVerifier,
        video_repo: VideoRepository,
        notifier: Notifier,
        audit: AuditLogger,
        executor: RetryingExecutor,
        audit_empty_body: bool = True,
    ):
        self.verifier = verifier
        self.video_repo = video_repo
        self.notifier = notifier
        self.audit = audit
        self.executor = executor
        self.audit_empty_body = audit_empty_body

    def _parse(self, body: bytes) -> Tuple[RemoteEvent, Any]:
        if not body or not body.strip():
            logger.error("Empty webhook payload received")
            if self.audit_empty_body:
                self.audit.record(success=False, error="Empty payload")
            raise MalformedEventError("Webhook body is empty", error="Empty payload")

        try:
            payload = json.loads(body)
        except ValueError as e:
            logger.error("Invalid JSON webhook payload: %s", e)
            self.audit.record(
                success=False,
                payload={"raw": body.decode("utf-8", errors="replace")},
                error="Invalid JSON payload",
            )
            raise MalformedEventError(f"Body is not valid JSON: {e}")

        try:
            return RemoteEvent.model_validate(payload), payload
        except ValidationError as e:
            logger.error("Webhook payload does not match the event shape: %s", e)
            self.audit.record(success=False, payload=payload, error="Invalid event payload")
            raise MalformedEventError(f"Body is not a valid event: {e.error_count()} validation error(s)")

    async def ingest(self, body: bytes, signature: Optional[str]) -> WebhookAck:
        event, payload = self._parse(body)

        if self.verifier.verify(body, signature) is SignatureCheck.INVALID:
            logger.error("Invalid webhook signature for event %s", event.event_id)
            self.audit.record(success=False, event=event, payload=payload, error="Invalid webhook signature")
            raise SignatureError("Invalid webhook signature")

        logger.info("Processing stream webhook: %s for video %s", event.raw_event_type, event.uid)
        mapped = map_event(event)

        try:
            video = self.video_repo.find_by_remote_id(event.uid)
        except RecordLookupError as e:
            logger.error("Webhook %s rejected: %s", event.event_id, e.message)
            self.audit.record(success=False, event=event, payload=payload, error=e.message)
            raise

        async def apply_and_notify() -> TransitionOutcome:
            outcome = self.video_repo.apply_transition(video, mapped)
            self.notifier.notify(outcome, source="webhook", event_type=event.raw_event_type)
            return outcome

        try:
            outcome = await self.executor.run(
                apply_and_notify, name=f"Webhook processing for {event.raw_event_type}"
            )
        except Exception as e:
            self.audit.record(success=False, event=event, payload=payload, error=str(e))
            raise ProcessingFailedError(str(e)) from e

        self.audit.record(success=True, event=event, payload=payload)
        logger.info(
            "Processed webhook %s for video %s (%s → %s%s)",
            event.event_id,
            event.uid,
            outcome.previous_status,
            outcome.video.processing_status,
            "" if outcome.changed else ", no change",
        )
        return WebhookAck(event_id=event.event_id, event_type=event.raw_event_type, video_uid=event.uid)
