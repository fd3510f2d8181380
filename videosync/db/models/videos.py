from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field
from sqlalchemy import BigInteger, Column

from .base import BaseModelDB


class ProcessingStatus(str, Enum):
    QUEUED = "queued"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"
    DELETED = "deleted"


# Vidéos pas encore terminales : ce que le sweep doit aller vérifier
IN_FLIGHT_STATUSES = (ProcessingStatus.UPLOADING.value, ProcessingStatus.PROCESSING.value)
TERMINAL_STATUSES = (
    ProcessingStatus.READY.value,
    ProcessingStatus.ERROR.value,
    ProcessingStatus.DELETED.value,
)


class Video(BaseModelDB, table=True):
    """Ligne de vérité locale d'une vidéo hébergée sur la plateforme de streaming."""

    title: str = Field(default="", description="Titre affiché dans l'admin")
    remote_asset_id: Optional[str] = Field(
        default=None,
        index=True,
        description="UID de l'asset côté plateforme (null tant que l'upload n'est pas terminé)",
    )
    processing_status: str = Field(default=ProcessingStatus.QUEUED.value, index=True)
    is_published: bool = Field(default=False, description="Vrai uniquement si processing_status = ready")

    # Métadonnées dérivées (remplies seulement en cas de succès)
    duration: Optional[int] = Field(default=None, description="Durée en secondes")
    resolution: Optional[str] = Field(default=None, description="Ex: 1920x1080")
    hls_url: Optional[str] = None
    dash_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    file_size: Optional[int] = Field(default=None, sa_column=Column(BigInteger, nullable=True))

    # Erreur (remplie seulement si processing_status = error)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    retry_count: int = Field(default=0)
    last_retry_at: Optional[datetime] = None
