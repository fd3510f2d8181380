"""
➡️ But : Gateway du store des vidéos. Seul composant qui modifie une ligne Video.

find_by_remote_id → exactement une ligne, sinon erreur d'intégrité (jamais retentée)

apply_transition → un seul UPDATE ... WHERE id = :id AND processing_status = :lu, idempotent
(si un autre writer est passé entre la lecture et l'écriture, on relit et on recalcule)

list_in_flight → vidéos uploading/processing pour le sweep

record_retry → remise en traitement après un retry côté plateforme
"""

from typing import Sequence
from sqlalchemy import update
from sqlmodel import select

from videosync.core.errors import (
    RetryNotAllowedError,
    TransitionConflictError,
    VideoIntegrityError,
    VideoNotFoundError,
)
from videosync.db.models.base import utcnow
from videosync.db.models.videos import IN_FLIGHT_STATUSES, ProcessingStatus, Video
from videosync.db.repositories.base import BaseRepository
from videosync.domain.transitions import MappedTransition, TransitionOutcome

# relectures max quand le statut change sous nos pieds
MAX_WRITE_ATTEMPTS = 5


class VideoRepository(BaseRepository[Video]):
    """CRUD Vidéos + transitions de statut."""
    model = Video

    def find_by_remote_id(self, remote_asset_id: str) -> Video:
        matches = self.session.exec(
            select(self.model).where(self.model.remote_asset_id == remote_asset_id).limit(2)
        ).all()
        if not matches:
            raise VideoNotFoundError(f"Video with remote id {remote_asset_id} not found")
        if len(matches) > 1:
            raise VideoIntegrityError(f"Several videos share remote id {remote_asset_id}")
        return matches[0]

    def list_in_flight(self) -> Sequence[Video]:
        return self.session.exec(
            select(self.model)
            .where(self.model.processing_status.in_(IN_FLIGHT_STATUSES))
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        ).all()

    def apply_transition(self, video: Video, mapped: MappedTransition) -> TransitionOutcome:
        values = mapped.column_values()
        for _ in range(MAX_WRITE_ATTEMPTS):
            # statut précédent lu dans le store, pas dans le cache de session
            self.session.refresh(video)
            previous = video.processing_status

            if all(getattr(video, column) == value for column, value in values.items()):
                # Transition déjà appliquée : aucune écriture, updated_at inchangé
                return TransitionOutcome(video=video, previous_status=previous, changed=False)

            if self._write(video, {**values, "updated_at": utcnow()}, expected_status=previous):
                return TransitionOutcome(video=video, previous_status=previous, changed=True)
            # un autre writer a changé le statut entre la lecture et l'écriture : on relit

        raise TransitionConflictError(f"Video {video.id} kept changing status during update")

    def record_retry(self, video: Video) -> Video:
        now = utcnow()
        written = self._write(video, {
            "processing_status": ProcessingStatus.PROCESSING.value,
            "is_published": False,
            "error_code": None,
            "error_message": None,
            "retry_count": self.model.retry_count + 1,
            "last_retry_at": now,
            "updated_at": now,
        }, expected_status=ProcessingStatus.ERROR.value)
        if not written:
            raise RetryNotAllowedError(f"Video {video.id} is no longer in error")
        return video

    def _exists(self, video_id: int) -> bool:
        return self.session.exec(select(self.model.id).where(self.model.id == video_id)).first() is not None

    def _write(self, video: Video, values: dict, *, expected_status: str) -> bool:
        """
        Écriture ligne entière en une instruction, conditionnée au statut lu juste avant.
        Retourne False si la ligne n'avait plus ce statut (rien n'est écrit).
        """
        statement = (
            update(self.model)
            .where(self.model.id == video.id, self.model.processing_status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(statement)
            written = result.rowcount == 1
            if written:
                self.session.commit()
            else:
                self.session.rollback()
        except Exception:
            self.session.rollback()
            raise

        if not written:
            if not self._exists(video.id):
                raise VideoNotFoundError(f"Video {video.id} disappeared during update")
            return False
        self.session.refresh(video)
        return True
