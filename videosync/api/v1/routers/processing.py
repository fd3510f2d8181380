from fastapi import APIRouter, Depends

from videosync.api.v1.dependencies import (
    get_reconciliation_service,
    get_video_repository,
    require_permission,
)
from videosync.db.repositories.videos import VideoRepository
from videosync.features.processing.schemas import (
    ProcessingListResponse,
    RetryResponse,
    SweepResponse,
    SyncResponse,
    VideoIdIn,
    VideoOut,
)
from videosync.features.processing.services import ReconciliationService
from videosync.security.access import Principal

router = APIRouter(
    prefix="/video-processing",
    tags=["video-processing"],
    responses={
        401: {"description": "Non authentifié"},
        403: {"description": "Interdit"},
    },
)

@router.get(
    "/processing",
    summary="Lister les vidéos en cours de traitement (uploading / processing)",
    response_model=ProcessingListResponse,
)
def list_processing_videos(
    _: Principal = Depends(require_permission("content.read")),
    video_repo: VideoRepository = Depends(get_video_repository),
):
    videos = video_repo.list_in_flight()
    return ProcessingListResponse(processing_videos=[VideoOut.model_validate(v) for v in videos])

@router.post(
    "/sync-all",
    summary="Réconcilier toutes les vidéos en cours avec la plateforme",
    description="Un échec sur une vidéo est compté dans `errors` sans interrompre le sweep.",
    response_model=SweepResponse,
)
async def sync_all(
    _: Principal = Depends(require_permission("content.write")),
    svc: ReconciliationService = Depends(get_reconciliation_service),
):
    summary = await svc.sweep()
    return SweepResponse(results=summary)

@router.post(
    "/sync-single",
    summary="Réconcilier une vidéo avec la plateforme",
    response_model=SyncResponse,
    responses={
        400: {"description": "Vidéo sans UID distant"},
        404: {"description": "Introuvable"},
        502: {"description": "Plateforme injoignable"},
    },
)
async def sync_single(
    payload: VideoIdIn,
    _: Principal = Depends(require_permission("content.write")),
    svc: ReconciliationService = Depends(get_reconciliation_service),
):
    result = await svc.reconcile_one(payload.video_id)
    return SyncResponse(result=result)

@router.post(
    "/retry",
    summary="Relancer le traitement d'une vidéo en erreur",
    response_model=RetryResponse,
    responses={
        404: {"description": "Introuvable"},
        409: {"description": "La vidéo n'est pas en erreur"},
        502: {"description": "Plateforme injoignable"},
    },
)
async def retry_processing(
    payload: VideoIdIn,
    _: Principal = Depends(require_permission("content.write")),
    svc: ReconciliationService = Depends(get_reconciliation_service),
):
    video = await svc.retry(payload.video_id)
    return RetryResponse(video=VideoOut.model_validate(video))
