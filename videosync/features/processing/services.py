"""
➡️ But : Réconciliation "pull" entre le store local et la plateforme de streaming.

sweep() → parcourt les vidéos uploading/processing, interroge la plateforme, applique
la même transition que le webhook. Un échec sur une vidéo n'arrête jamais le sweep.

reconcile_one(video_id) → même chose pour une seule vidéo, à la demande.

retry(video_id) → relance le traitement côté plateforme et remet la vidéo en processing.

🔹 Avantages :

Garantit la convergence quand les webhooks sont perdus, en retard ou jamais configurés.
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from videosync.core.errors import (
    MissingRemoteAssetError,
    ReconciliationFailedError,
    RemotePlatformError,
    RetryNotAllowedError,
    ServiceError,
    VideoNotFoundError,
)
from videosync.db.models.videos import ProcessingStatus, Video
from videosync.db.repositories.videos import VideoRepository
from videosync.domain.transitions import TransitionOutcome
from videosync.features.processing.mapper import map_remote_status
from videosync.features.processing.notifier import Notifier
from videosync.features.processing.retry import RetryingExecutor
from videosync.features.processing.schemas import SweepDetail, SweepSummary, SyncResult
from videosync.utils.stream import RemoteAssetStatus, StreamClient

logger = logging.getLogger(__name__)

NO_REMOTE_ID = "No remote asset id"


class ReconciliationService:
    def __init__(
        self,
        *,
        video_repo: VideoRepository,
        stream: StreamClient,
        notifier: Notifier,
        executor: RetryingExecutor,
        concurrency: int = 1,
    ):
        self.video_repo = video_repo
        self.stream = stream
        self.notifier = notifier
        self.executor = executor
        self.concurrency = max(1, concurrency)

    # ---------- Unité de travail ----------

    async def _reconcile(self, video: Video) -> Tuple[RemoteAssetStatus, Optional[TransitionOutcome]]:
        async def check_and_apply() -> Tuple[RemoteAssetStatus, Optional[TransitionOutcome]]:
            remote = await self.stream.get_status(video.remote_asset_id)
            mapped = map_remote_status(remote)
            if mapped is None:
                return remote, None
            outcome = self.video_repo.apply_transition(video, mapped)
            self.notifier.notify(outcome, source="sweep")
            return remote, outcome

        return await self.executor.run(check_and_apply, name=f"Reconciliation of video {video.id}")

    # ---------- Sweep ----------

    async def _sweep_one(self, video: Video) -> SweepDetail:
        old_status = video.processing_status
        if not video.remote_asset_id:
            logger.warning("Video %s (%s) is in flight without remote asset id", video.id, video.title)
            return SweepDetail(video_id=video.id, title=video.title, old_status=old_status, error=NO_REMOTE_ID)

        try:
            remote, outcome = await self._reconcile(video)
        except Exception as e:
            logger.error("Error checking video %s (%s): %s", video.id, video.title, e)
            return SweepDetail(video_id=video.id, title=video.title, old_status=old_status, error=str(e) or type(e).__name__)

        if outcome is None:
            return SweepDetail(
                video_id=video.id,
                title=video.title,
                old_status=old_status,
                new_status=old_status,
                remote_status=remote.status.value,
                progress=remote.progress,
            )
        return SweepDetail(
            video_id=video.id,
            title=video.title,
            old_status=outcome.previous_status,
            new_status=outcome.video.processing_status,
            remote_status=remote.status.value,
            progress=remote.progress,
            updated=outcome.changed,
        )

    async def sweep(self) -> SweepSummary:
        videos: Sequence[Video] = self.video_repo.list_in_flight()
        logger.info("Sweeping %d in-flight videos (concurrency %d)", len(videos), self.concurrency)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def guarded(video: Video) -> SweepDetail:
            async with semaphore:
                return await self._sweep_one(video)

        details: List[SweepDetail] = await asyncio.gather(*(guarded(v) for v in videos))

        summary = SweepSummary()
        for detail in details:
            summary.add(detail)

        logger.info("Sweep results: checked %d, updated %d, errors %d", summary.checked, summary.updated, summary.errors)
        if summary.errors:
            logger.info("Sweep error details: %s", [d.model_dump() for d in summary.details if d.error])
        return summary

    # ---------- Une vidéo ----------

    def _get_remote_video(self, video_id: int) -> Video:
        video = self.video_repo.get(video_id)
        if not video:
            raise VideoNotFoundError(f"Video {video_id} not found")
        if not video.remote_asset_id:
            raise MissingRemoteAssetError(f"Video {video_id} has no remote asset id")
        return video

    async def reconcile_one(self, video_id: int) -> SyncResult:
        video = self._get_remote_video(video_id)
        old_status = video.processing_status

        try:
            remote, outcome = await self._reconcile(video)
        except ServiceError:
            raise
        except Exception as e:
            raise ReconciliationFailedError(f"Failed to update video {video_id}: {e}") from e

        if outcome is not None and outcome.changed:
            logger.info("Video sync: %s updated %s → %s", video.title, outcome.previous_status, video.processing_status)

        return SyncResult(
            video_id=video.id,
            title=video.title,
            old_status=outcome.previous_status if outcome else old_status,
            new_status=video.processing_status,
            remote_status=remote.status.value,
            progress=remote.progress,
            updated=bool(outcome and outcome.changed),
        )

    async def retry(self, video_id: int) -> Video:
        video = self._get_remote_video(video_id)
        if video.processing_status != ProcessingStatus.ERROR.value:
            raise RetryNotAllowedError(
                f"Video {video_id} is {video.processing_status}, only videos in error can be retried"
            )

        uid = video.remote_asset_id
        try:
            await self.executor.run(lambda: self.stream.retry_processing(uid), name=f"Retry of video {video.id}")
        except RemotePlatformError:
            raise
        except Exception as e:
            raise RemotePlatformError(f"Failed to retry processing for video {video_id}: {e}") from e

        self.video_repo.record_retry(video)
        logger.info("Video %s sent back to processing (retry #%d)", video.id, video.retry_count)
        return video
