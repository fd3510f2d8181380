"""
➡️ But : Types du domaine partagés entre le mapper, le gateway et les services.

MappedTransition → résultat pur du mapping d'un événement (ou d'un statut distant)

VideoMetadata / ErrorInfo → champs optionnels portés par la transition

TransitionOutcome → ce que le gateway a réellement fait (statut précédent, écriture ou non)

Aucune I/O ici : ces objets sont immuables et comparables, ce qui rend le mapper testable seul.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from videosync.db.models.videos import ProcessingStatus, Video


@dataclass(frozen=True)
class VideoMetadata:
    duration: Optional[int] = None
    resolution: Optional[str] = None
    hls_url: Optional[str] = None
    dash_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None
    file_size: Optional[int] = None

    def present(self) -> Dict[str, Any]:
        """Seulement les champs renseignés : les absents ne doivent pas écraser la ligne."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(frozen=True)
class ErrorInfo:
    code: str = "unknown"
    message: str = "Unknown error"


@dataclass(frozen=True)
class MappedTransition:
    status: ProcessingStatus
    publish: bool = False
    metadata: VideoMetadata = field(default_factory=VideoMetadata)
    error: Optional[ErrorInfo] = None

    def column_values(self) -> Dict[str, Any]:
        """
        Colonnes à écrire pour cette transition.
        - publish n'est vrai que pour ready (invariant is_published ⇒ ready)
        - les champs d'erreur sont posés pour error et remis à null sinon
        """
        values: Dict[str, Any] = {
            "processing_status": self.status.value,
            "is_published": self.publish and self.status is ProcessingStatus.READY,
        }
        values.update(self.metadata.present())
        if self.status is ProcessingStatus.ERROR:
            info = self.error or ErrorInfo()
            values["error_code"] = info.code
            values["error_message"] = info.message
        else:
            values["error_code"] = None
            values["error_message"] = None
        return values


@dataclass
class TransitionOutcome:
    video: Video
    previous_status: str
    changed: bool
