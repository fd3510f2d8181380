from typing import Any, Optional
from sqlmodel import Field
from sqlalchemy import JSON, Column

from .base import BaseModelDB


class SystemLog(BaseModelDB, table=True):
    level: str = Field(description="info | warning | error")
    category: str = Field(index=True)
    message: str
    details: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))
