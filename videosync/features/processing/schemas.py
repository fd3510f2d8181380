"""
➡️ But : Formats de sortie des routes de réconciliation.

Les champs sont en snake_case côté Python et sérialisés en camelCase (videoId, oldStatus...),
le format attendu par le dashboard d'admin.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class VideoOut(CamelModel):
    id: int
    title: str
    remote_asset_id: Optional[str]
    processing_status: str
    is_published: bool
    duration: Optional[int] = None
    resolution: Optional[str] = None
    thumbnail_url: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    retry_count: int = 0
    last_retry_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SweepDetail(CamelModel):
    video_id: int
    title: str
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    remote_status: Optional[str] = None
    progress: Optional[int] = Field(default=None, description="Avancement côté plateforme (%)")
    updated: bool = False
    error: Optional[str] = None


class SweepSummary(CamelModel):
    checked: int = 0
    updated: int = 0
    errors: int = 0
    details: List[SweepDetail] = Field(default_factory=list)

    def add(self, detail: SweepDetail) -> None:
        self.details.append(detail)
        if detail.error is not None:
            self.errors += 1
            return
        self.checked += 1
        if detail.updated:
            self.updated += 1


class SweepResponse(CamelModel):
    success: bool = True
    results: SweepSummary


class VideoIdIn(CamelModel):
    video_id: int = Field(..., ge=1, examples=[42])


class SyncResult(CamelModel):
    video_id: int
    title: str
    old_status: str
    new_status: str
    remote_status: str
    progress: int = 0
    updated: bool = False


class SyncResponse(CamelModel):
    success: bool = True
    result: SyncResult


class ProcessingListResponse(CamelModel):
    success: bool = True
    processing_videos: List[VideoOut]


class RetryResponse(CamelModel):
    success: bool = True
    video: VideoOut
