from typing import Any, Optional
from sqlmodel import Field
from sqlalchemy import JSON, Column, ForeignKey, Integer

from .base import BaseModelDB


class Notification(BaseModelDB, table=True):
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("profile.id"),
            nullable=False,
            index=True,
        ),
        description="Admin destinataire",
    )
    title: str
    message: str
    type: str = Field(description="success | error")
    category: str = Field(default="video_processing", index=True)
    # "metadata" est réservé par SQLAlchemy
    details: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))
