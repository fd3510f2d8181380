from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class Profile(BaseModelDB, table=True):
    """Comptes connus localement ; admin_role non null = compte privilégié."""

    email: str = Field(index=True, unique=True)
    admin_role: Optional[str] = Field(default=None, index=True)
