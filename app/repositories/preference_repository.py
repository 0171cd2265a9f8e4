"""사용자 환경설정 레포지토리.

User Preference Repository: per-user key/value rows.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.preference import UserPreference
from app.repositories.base import BaseRepository


class UserPreferenceRepository(BaseRepository[UserPreference]):
    def __init__(self) -> None:
        super().__init__(UserPreference)

    async def get_for_user(self, db: AsyncSession, user_id: UUID) -> Sequence[UserPreference]:
        result = await db.execute(
            select(UserPreference).where(UserPreference.user_id == user_id).order_by(UserPreference.key)
        )
        return result.scalars().all()

    async def get_key(self, db: AsyncSession, user_id: UUID, key: str) -> UserPreference | None:
        return await self.get_one_by(db, user_id=user_id, key=key)


# 싱글턴 인스턴스 — Singleton instance
user_preference_repository: UserPreferenceRepository = UserPreferenceRepository()
