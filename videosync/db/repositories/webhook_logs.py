from typing import Sequence
from sqlmodel import select

from videosync.db.repositories.base import BaseRepository
from videosync.db.models.webhook_logs import WebhookLog


class WebhookLogRepository(BaseRepository[WebhookLog]):
    """Journal d'audit : ajout uniquement, jamais de mise à jour ni de suppression."""
    model = WebhookLog

    def append(self, **fields) -> WebhookLog:
        return self.create(**fields)

    def list_for_uid(self, video_uid: str) -> Sequence[WebhookLog]:
        return self.session.exec(
            select(self.model)
            .where(self.model.video_uid == video_uid)
            .order_by(self.model.timestamp, self.model.id)
        ).all()
