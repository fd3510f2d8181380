"""
Client de l'API de la plateforme de streaming (collaborateur externe, opaque).

get_status(uid) → statut courant + métadonnées

retry_processing(uid) → relance le traitement d'un asset en erreur

Toute réponse non 2xx, tout envelope `success: false` et toute erreur réseau
deviennent une RemotePlatformError.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from videosync.core.config import StreamSettings
from videosync.core.errors import RemotePlatformError
from videosync.db.models.videos import ProcessingStatus

logger = logging.getLogger(__name__)

STATE_TO_STATUS: Dict[str, ProcessingStatus] = {
    "pendingupload": ProcessingStatus.UPLOADING,
    "downloading": ProcessingStatus.UPLOADING,
    "queued": ProcessingStatus.PROCESSING,
    "inprogress": ProcessingStatus.PROCESSING,
    "ready": ProcessingStatus.READY,
    "error": ProcessingStatus.ERROR,
}


def state_to_status(state: Optional[str]) -> ProcessingStatus:
    return STATE_TO_STATUS.get(state or "", ProcessingStatus.PROCESSING)


@dataclass(frozen=True)
class RemoteAssetStatus:
    uid: str
    state: Optional[str]
    status: ProcessingStatus
    progress: int = 0
    duration: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None
    hls_url: Optional[str] = None
    dash_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    size: Optional[int] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None


def _pct(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


class StreamClient:
    def __init__(self, settings: StreamSettings, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.settings.api_base.rstrip('/')}/accounts/{self.settings.account_id}/stream",
            headers={"Authorization": f"Bearer {self.settings.api_token}"},
            timeout=self.settings.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, uid: str, **kwargs) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, f"/{uid}", **kwargs)
        except httpx.HTTPError as e:
            raise RemotePlatformError(f"Streaming platform unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        errors = data.get("errors") or []
        first_error = errors[0].get("message") if errors and isinstance(errors[0], dict) else None
        if response.status_code >= 400:
            raise RemotePlatformError(
                first_error or f"HTTP {response.status_code}: {response.reason_phrase}",
                http_status=response.status_code,
            )
        if not data.get("success"):
            raise RemotePlatformError(first_error or "Unknown streaming platform error", http_status=response.status_code)
        return data.get("result") or {}

    def thumbnail_url(self, uid: str) -> Optional[str]:
        if not self.settings.customer_subdomain:
            return None
        return f"https://{self.settings.customer_subdomain}/{uid}/thumbnails/thumbnail.jpg"

    async def get_status(self, uid: str) -> RemoteAssetStatus:
        result = await self._request("GET", uid)
        state = result.get("status") or {}
        playback = result.get("playback") or {}
        dims = result.get("input") or {}
        return RemoteAssetStatus(
            uid=result.get("uid") or uid,
            state=state.get("state"),
            status=state_to_status(state.get("state")),
            progress=_pct(state.get("pctComplete")),
            duration=result.get("duration") if (result.get("duration") or 0) > 0 else None,
            width=dims.get("width") or None,
            height=dims.get("height") or None,
            hls_url=playback.get("hls"),
            dash_url=playback.get("dash"),
            thumbnail_url=result.get("thumbnail") or self.thumbnail_url(uid),
            preview_url=result.get("preview"),
            size=result.get("size") or None,
            error_code=state.get("errorReasonCode"),
            error_message=state.get("errorReasonText"),
        )

    async def retry_processing(self, uid: str) -> None:
        result = await self._request("GET", uid)
        if (result.get("status") or {}).get("state") == "ready":
            raise RemotePlatformError(f"Video {uid} is already processed successfully")
        # Pas d'endpoint "retry" : on touche les métadonnées pour relancer le traitement
        meta = dict(result.get("meta") or {})
        meta["retry_timestamp"] = datetime.now(timezone.utc).isoformat()
        await self._request("POST", uid, json={"meta": meta})
        logger.info("Retry requested on streaming platform for %s", uid)
