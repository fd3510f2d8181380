from datetime import datetime
from typing import Any, Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column

from .base import utcnow


class WebhookLog(SQLModel, table=True):
    """Journal d'audit append-only : une ligne par événement reçu, quel que soit le résultat."""

    id: Optional[int] = Field(default=None, primary_key=True)
    webhook_source: str = Field(default="stream", index=True)
    event_id: Optional[str] = Field(default=None, index=True)
    event_type: Optional[str] = None
    video_uid: Optional[str] = Field(default=None, index=True)
    success: bool = Field(default=False)
    error_message: Optional[str] = None
    event_data: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))
    timestamp: datetime = Field(default_factory=utcnow)
