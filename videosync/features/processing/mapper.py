"""
➡️ But : Table de transition unique entre ce que dit la plateforme et le statut local.

map_event(RemoteEvent) → chemin push (webhook)

map_remote_status(RemoteAssetStatus) → chemin pull (sweep / sync-single), ready et error seulement

Fonctions pures : pas de DB, pas de réseau, jamais d'exception.

🔹 Avantages :

Les deux chemins d'ingestion ne peuvent pas diverger.

Testable sans store ni plateforme.
"""

import logging
import math
from typing import Callable, Dict, Optional

from videosync.db.models.videos import ProcessingStatus
from videosync.domain.transitions import ErrorInfo, MappedTransition, VideoMetadata
from videosync.features.webhooks.schemas import EventType, RemoteEvent
from videosync.utils.stream import RemoteAssetStatus

logger = logging.getLogger(__name__)


def round_duration(seconds: Optional[float]) -> Optional[int]:
    """Arrondi à la seconde, demi vers le haut (125.5 → 126). Durée non finie ou <= 0 : absente."""
    if seconds is None or not math.isfinite(seconds) or seconds <= 0:
        return None
    return int(math.floor(seconds + 0.5))


def format_resolution(width: Optional[int], height: Optional[int]) -> Optional[str]:
    if width and height:
        return f"{width}x{height}"
    return None


def build_error(code: Optional[str], message: Optional[str]) -> ErrorInfo:
    return ErrorInfo(code=code or "unknown", message=message or "Unknown error")


# ----------------------------------------------------------
# Push : événements webhook
# ----------------------------------------------------------

def _event_metadata(event: RemoteEvent) -> VideoMetadata:
    playback = event.playback
    dims = event.input
    return VideoMetadata(
        duration=round_duration(event.duration),
        resolution=format_resolution(dims.width, dims.height) if dims else None,
        hls_url=playback.hls if playback else None,
        dash_url=playback.dash if playback else None,
        thumbnail_url=event.thumbnail or None,
        preview_url=event.preview or None,
        file_size=event.size or None,
    )


def _processing(event: RemoteEvent) -> MappedTransition:
    return MappedTransition(status=ProcessingStatus.PROCESSING)


def _ready(event: RemoteEvent) -> MappedTransition:
    return MappedTransition(status=ProcessingStatus.READY, publish=True, metadata=_event_metadata(event))


def _failed(event: RemoteEvent) -> MappedTransition:
    state = event.status
    return MappedTransition(
        status=ProcessingStatus.ERROR,
        error=build_error(
            state.error_reason_code if state else None,
            state.error_reason_text if state else None,
        ),
    )


def _deleted(event: RemoteEvent) -> MappedTransition:
    return MappedTransition(status=ProcessingStatus.DELETED)


def _unknown(event: RemoteEvent) -> MappedTransition:
    logger.warning("Unrecognized event type %r for video %s: defaulting to queued", event.raw_event_type, event.uid)
    return MappedTransition(status=ProcessingStatus.QUEUED)


EVENT_TRANSITIONS: Dict[EventType, Callable[[RemoteEvent], MappedTransition]] = {
    EventType.UPLOAD_COMPLETE: _processing,
    EventType.PROCESSING_STARTED: _processing,
    EventType.PROCESSING_COMPLETE: _ready,
    EventType.READY: _ready,
    EventType.PROCESSING_FAILED: _failed,
    EventType.DELETED: _deleted,
    EventType.UNKNOWN: _unknown,
}

# Chaque membre d'EventType doit avoir sa ligne dans la table.
assert set(EVENT_TRANSITIONS) == set(EventType), "EVENT_TRANSITIONS must cover every EventType"


def map_event(event: RemoteEvent) -> MappedTransition:
    return EVENT_TRANSITIONS[event.event_type](event)


# ----------------------------------------------------------
# Pull : statut lu directement sur la plateforme
# ----------------------------------------------------------

def map_remote_status(remote: RemoteAssetStatus) -> Optional[MappedTransition]:
    """None tant que la plateforme n'a pas atteint un statut terminal (rien à réconcilier)."""
    status = remote.status
    if status is ProcessingStatus.READY:
        return MappedTransition(
            status=ProcessingStatus.READY,
            publish=True,
            metadata=VideoMetadata(
                duration=round_duration(remote.duration),
                resolution=format_resolution(remote.width, remote.height),
                hls_url=remote.hls_url,
                dash_url=remote.dash_url,
                thumbnail_url=remote.thumbnail_url,
                preview_url=remote.preview_url,
                file_size=remote.size,
            ),
        )
    if status is ProcessingStatus.ERROR:
        return MappedTransition(
            status=ProcessingStatus.ERROR,
            error=build_error(remote.error_code, remote.error_message),
        )
    return None
