"""
➡️ But : Prévenir les admins quand une vidéo atteint ready ou error.

Au plus une notification par (vidéo, issue terminale) : si le statut précédent était
déjà le statut visé (rejeu d'un événement, sweep après webhook), on ne notifie pas.

Best effort : un échec est loggé, jamais relancé, et n'annule pas la transition déjà écrite.
"""

import logging
from typing import Optional

from videosync.db.models.notifications import Notification
from videosync.db.models.system_logs import SystemLog
from videosync.db.models.videos import ProcessingStatus
from videosync.db.repositories.notifications import NotificationRepository
from videosync.db.repositories.profiles import ProfileRepository
from videosync.domain.transitions import TransitionOutcome
from videosync.security.access import NOTIFIED_ROLES

logger = logging.getLogger(__name__)

NOTIFIED_STATUSES = (ProcessingStatus.READY.value, ProcessingStatus.ERROR.value)


class Notifier:
    def __init__(self, *, profile_repo: ProfileRepository, notification_repo: NotificationRepository):
        self.profile_repo = profile_repo
        self.notification_repo = notification_repo

    def notify(self, outcome: TransitionOutcome, *, source: str, event_type: Optional[str] = None) -> int:
        """Retourne le nombre de notifications écrites (0 si ignoré ou en échec)."""
        video = outcome.video
        status = video.processing_status
        if status not in NOTIFIED_STATUSES:
            return 0
        if outcome.previous_status == status:
            logger.debug("Video %s already %s: notification skipped", video.id, status)
            return 0

        is_error = status == ProcessingStatus.ERROR.value
        label = video.title or video.remote_asset_id
        if is_error:
            title = "Video Processing Failed"
            message = f'Video "{label}" failed to process: {video.error_message or "Unknown error"}'
        else:
            title = "Video Processing Complete"
            message = f'Video "{label}" is now ready for viewing'

        details = {
            "video_id": video.id,
            "video_uid": video.remote_asset_id,
            "outcome": status,
            "previous_status": outcome.previous_status,
            "event_type": event_type,
            "source": source,
        }

        try:
            admins = self.profile_repo.list_admins(NOTIFIED_ROLES)
            notifications = [
                Notification(
                    user_id=admin.id,
                    title=title,
                    message=message,
                    type="error" if is_error else "success",
                    category="video_processing",
                    details=details,
                )
                for admin in admins
            ]
            system_log = SystemLog(
                level="error" if is_error else "info",
                category="video_processing",
                message=message,
                details=details,
            )
            self.notification_repo.create_batch(notifications, system_log)
        except Exception:
            logger.exception("Failed to create admin notifications for video %s", video.id)
            return 0

        logger.info("Sent %d admin notifications for video %s (%s)", len(notifications), video.id, status)
        return len(notifications)
