"""
➡️ But : Définir les formats d'entrée/sortie du webhook (couche validation).

RemoteEvent → corps JSON envoyé par la plateforme de streaming

EventType → énumération fermée des types d'événements (inconnu → UNKNOWN, jamais d'exception)

WebhookAck → réponse 200
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    UPLOAD_COMPLETE = "video.upload.complete"
    PROCESSING_STARTED = "video.processing.started"
    PROCESSING_COMPLETE = "video.processing.complete"
    READY = "video.ready"
    PROCESSING_FAILED = "video.processing.failed"
    DELETED = "video.deleted"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "EventType":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class Playback(BaseModel):
    hls: Optional[str] = None
    dash: Optional[str] = None


class InputDimensions(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None


class RemoteState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    state: Optional[str] = None
    pct_complete: Optional[str] = Field(default=None, alias="pctComplete")
    error_reason_code: Optional[str] = Field(default=None, alias="errorReasonCode")
    error_reason_text: Optional[str] = Field(default=None, alias="errorReasonText")


class RemoteEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: Optional[str] = Field(default=None, alias="eventId")
    event_timestamp: Optional[str] = Field(default=None, alias="eventTimestamp")
    raw_event_type: str = Field(alias="eventType")
    uid: str = Field(min_length=1)
    meta: Optional[Dict[str, Any]] = None
    playback: Optional[Playback] = None
    preview: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    input: Optional[InputDimensions] = None
    status: Optional[RemoteState] = None
    size: Optional[int] = None

    @field_validator("raw_event_type", mode="before")
    @classmethod
    def _coerce_event_type(cls, value):
        # absent ou null : événement invalide (400) ; non textuel : type inconnu
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def event_type(self) -> EventType:
        return EventType.parse(self.raw_event_type)


class WebhookAck(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    event_id: Optional[str] = None
    event_type: str
    video_uid: str


class WebhookInfo(BaseModel):
    message: str
