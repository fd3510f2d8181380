from typing import Iterable, Sequence
from sqlmodel import select

from videosync.db.repositories.base import BaseRepository
from videosync.db.models.profiles import Profile


class ProfileRepository(BaseRepository[Profile]):
    model = Profile

    def list_admins(self, roles: Iterable[str]) -> Sequence[Profile]:
        return self.session.exec(
            select(self.model)
            .where(self.model.admin_role.in_(tuple(roles)))
            .order_by(self.model.id)
        ).all()
