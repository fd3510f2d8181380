from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse

from videosync.api.v1.dependencies import get_webhook_service
from videosync.features.webhooks.schemas import WebhookAck, WebhookInfo
from videosync.features.webhooks.services import WebhookService

router = APIRouter(
    prefix="/webhooks",
    tags=["webhooks"],
)

ERROR_RESPONSES = {
    400: {"description": "Corps vide ou JSON invalide"},
    401: {"description": "Signature invalide"},
    404: {"description": "Aucune vidéo pour cet UID"},
    409: {"description": "Plusieurs vidéos pour cet UID"},
    500: {"description": "Retries épuisés"},
}

@router.post(
    "/stream",
    summary="Recevoir un événement de la plateforme de streaming",
    description=(
        "Vérifie la signature HMAC (`x-signature: sha256=<hex>`), applique la transition de statut "
        "à la vidéo correspondante (avec retry), notifie les admins et trace l'événement."
    ),
    response_model=WebhookAck,
    responses=ERROR_RESPONSES,
)
async def receive_stream_event(
    request: Request,
    x_signature: Optional[str] = Header(default=None, alias="x-signature"),
    svc: WebhookService = Depends(get_webhook_service),
):
    # corps brut : la signature est calculée dessus, pas sur le JSON re-sérialisé
    body = await request.body()
    return await svc.ingest(body, x_signature)

@router.get(
    "/stream",
    summary="Informations sur le endpoint webhook",
    response_model=WebhookInfo,
)
def stream_webhook_info():
    return WebhookInfo(message="Streaming platform webhook endpoint")

@router.put("/stream", include_in_schema=False)
@router.delete("/stream", include_in_schema=False)
def stream_webhook_method_not_allowed():
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"error": "Method not allowed"},
    )
