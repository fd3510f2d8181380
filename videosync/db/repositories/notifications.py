from typing import List, Sequence
from sqlmodel import select

from videosync.db.repositories.base import BaseRepository
from videosync.db.models.notifications import Notification
from videosync.db.models.system_logs import SystemLog


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    def create_batch(self, notifications: List[Notification], system_log: SystemLog) -> None:
        """Notifications + ligne de log système dans une même transaction."""
        self.session.add_all(notifications)
        self.session.add(system_log)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def list_for_video(self, video_id: int, *, type_: str = None) -> Sequence[Notification]:
        rows = self.session.exec(
            select(self.model).where(self.model.category == "video_processing").order_by(self.model.id)
        ).all()
        # filtre sur le JSON en Python : portable SQLite / Postgres
        return [
            n for n in rows
            if (n.details or {}).get("video_id") == video_id and (type_ is None or n.type == type_)
        ]
