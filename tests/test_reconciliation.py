import pytest

from videosync.core.errors import (
    MissingRemoteAssetError,
    ReconciliationFailedError,
    RemotePlatformError,
    RetryNotAllowedError,
    VideoNotFoundError,
)
from videosync.db.repositories.notifications import NotificationRepository
from videosync.features.processing.services import NO_REMOTE_ID, ReconciliationService

from conftest import remote_status


class TestSweep:
    @pytest.mark.asyncio
    async def test_repairs_lost_ready_event(self, reconciliation_service, stream, session, make_video, admins):
        video = make_video(remote_asset_id="abc123", processing_status="processing")
        stream.statuses["abc123"] = remote_status("abc123", "ready", duration=125.4, width=1920, height=1080)

        summary = await reconciliation_service.sweep()

        assert (summary.checked, summary.updated, summary.errors) == (1, 1, 0)
        detail = summary.details[0]
        assert (detail.old_status, detail.new_status, detail.remote_status) == ("processing", "ready", "ready")
        assert detail.updated is True

        session.refresh(video)
        assert video.processing_status == "ready"
        assert video.is_published is True
        assert video.duration == 125
        assert len(NotificationRepository(session).list_for_video(video.id)) == len(admins)

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_the_sweep(self, reconciliation_service, stream, make_video):
        for i in range(4):
            make_video(remote_asset_id=f"uid-{i}", processing_status="processing")
            stream.statuses[f"uid-{i}"] = remote_status(f"uid-{i}", "ready")
        stream.statuses["uid-2"] = RemotePlatformError("HTTP 503: Service Unavailable", http_status=503)

        summary = await reconciliation_service.sweep()

        assert summary.errors == 1
        assert summary.checked == 3
        assert summary.updated == 3
        failed = [d for d in summary.details if d.error]
        assert failed[0].error == "HTTP 503: Service Unavailable"
        # tentatives épuisées sur le seul enregistrement en échec
        assert stream.status_calls.count("uid-2") == 4

    @pytest.mark.asyncio
    async def test_missing_remote_id_is_reported(self, reconciliation_service, stream, make_video):
        orphan = make_video(title="Never uploaded", processing_status="uploading")

        summary = await reconciliation_service.sweep()

        assert summary.errors == 1
        assert summary.details[0].video_id == orphan.id
        assert summary.details[0].error == NO_REMOTE_ID
        assert stream.status_calls == []

    @pytest.mark.asyncio
    async def test_still_processing_is_left_alone(self, reconciliation_service, stream, session, make_video):
        video = make_video(remote_asset_id="abc123", processing_status="uploading")
        updated_at = video.updated_at
        stream.statuses["abc123"] = remote_status("abc123", "inprogress", progress=42)

        summary = await reconciliation_service.sweep()

        assert (summary.checked, summary.updated, summary.errors) == (1, 0, 0)
        assert summary.details[0].remote_status == "processing"
        assert summary.details[0].progress == 42
        assert summary.details[0].model_dump(by_alias=True)["progress"] == 42
        session.refresh(video)
        assert video.processing_status == "uploading"
        assert video.updated_at == updated_at

    @pytest.mark.asyncio
    async def test_remote_error_marks_video_failed(self, reconciliation_service, stream, session, make_video):
        video = make_video(remote_asset_id="abc123")
        stream.statuses["abc123"] = remote_status("abc123", "error", error_code="ERR_DURATION", error_message="Too long")

        await reconciliation_service.sweep()

        session.refresh(video)
        assert (video.processing_status, video.error_code, video.error_message) == ("error", "ERR_DURATION", "Too long")

    @pytest.mark.asyncio
    async def test_terminal_videos_are_not_checked(self, reconciliation_service, stream, make_video):
        make_video(remote_asset_id="done", processing_status="ready", is_published=True)
        make_video(remote_asset_id="failed", processing_status="error")

        summary = await reconciliation_service.sweep()

        assert summary.details == []
        assert stream.status_calls == []

    @pytest.mark.asyncio
    async def test_concurrent_sweep_keeps_order(self, video_repo, notifier, executor, stream, make_video):
        for i in range(5):
            make_video(remote_asset_id=f"uid-{i}")
            stream.statuses[f"uid-{i}"] = remote_status(f"uid-{i}", "ready")
        service = ReconciliationService(
            video_repo=video_repo, stream=stream, notifier=notifier, executor=executor, concurrency=3
        )

        expected = [v.id for v in video_repo.list_in_flight()]

        summary = await service.sweep()

        assert summary.updated == 5
        assert [d.video_id for d in summary.details] == expected


class TestSingle:
    @pytest.mark.asyncio
    async def test_reconcile_one(self, reconciliation_service, stream, make_video):
        video = make_video(remote_asset_id="abc123")
        stream.statuses["abc123"] = remote_status("abc123", "ready")

        result = await reconciliation_service.reconcile_one(video.id)

        assert (result.old_status, result.new_status, result.updated) == ("processing", "ready", True)

        again = await reconciliation_service.reconcile_one(video.id)
        assert (again.old_status, again.new_status, again.updated) == ("ready", "ready", False)

    @pytest.mark.asyncio
    async def test_unknown_video(self, reconciliation_service):
        with pytest.raises(VideoNotFoundError):
            await reconciliation_service.reconcile_one(999)

    @pytest.mark.asyncio
    async def test_video_without_remote_id(self, reconciliation_service, make_video):
        video = make_video()
        with pytest.raises(MissingRemoteAssetError):
            await reconciliation_service.reconcile_one(video.id)

    @pytest.mark.asyncio
    async def test_platform_error_is_kept(self, reconciliation_service, stream, make_video):
        video = make_video(remote_asset_id="abc123")
        stream.statuses["abc123"] = RemotePlatformError("Video not found", http_status=404)

        with pytest.raises(RemotePlatformError):
            await reconciliation_service.reconcile_one(video.id)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, reconciliation_service, stream, make_video):
        video = make_video(remote_asset_id="abc123")
        stream.statuses["abc123"] = ValueError("unexpected payload")

        with pytest.raises(ReconciliationFailedError, match="unexpected payload"):
            await reconciliation_service.reconcile_one(video.id)


class TestRetry:
    @pytest.mark.asyncio
    async def test_retry_failed_video(self, reconciliation_service, stream, make_video):
        video = make_video(remote_asset_id="abc123", processing_status="error", error_message="broken")

        retried = await reconciliation_service.retry(video.id)

        assert stream.retried == ["abc123"]
        assert retried.processing_status == "processing"
        assert retried.error_message is None
        assert retried.retry_count == 1

    @pytest.mark.asyncio
    async def test_only_failed_videos_can_be_retried(self, reconciliation_service, stream, make_video):
        video = make_video(remote_asset_id="abc123", processing_status="ready", is_published=True)

        with pytest.raises(RetryNotAllowedError):
            await reconciliation_service.retry(video.id)
        assert stream.retried == []

    @pytest.mark.asyncio
    async def test_platform_failure_leaves_video_in_error(
        self, reconciliation_service, stream, session, make_video, monkeypatch
    ):
        video = make_video(remote_asset_id="abc123", processing_status="error")

        async def broken(uid):
            raise OSError("connection reset")

        monkeypatch.setattr(stream, "retry_processing", broken)

        with pytest.raises(RemotePlatformError, match="connection reset"):
            await reconciliation_service.retry(video.id)

        session.refresh(video)
        assert video.processing_status == "error"
        assert video.retry_count == 0
