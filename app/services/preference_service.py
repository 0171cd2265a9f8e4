"""사용자 환경설정 서비스 — 사용자별 키-값 저장소.

User preference store (menu ordering, sidebar state and similar UI state),
scoped per user.
"""

import re
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.preference import UserPreference
from app.repositories.preference_repository import user_preference_repository
from app.utils.exceptions import NotFoundError, ValidationError

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{1,100}$")


class PreferenceService:
    """환경설정 서비스 — Preference service."""

    def _check_key(self, key: str) -> None:
        if not _KEY_PATTERN.match(key):
            raise ValidationError("Geçersiz tercih anahtarı (Invalid preference key)")

    async def get_all(self, db: AsyncSession, user_id: UUID) -> dict[str, Any]:
        prefs = await user_preference_repository.get_for_user(db, user_id)
        return {p.key: p.value for p in prefs}

    async def set(self, db: AsyncSession, user_id: UUID, key: str, value: Any) -> UserPreference:
        """설정값 저장 (있으면 덮어씀) — Upsert one preference."""
        self._check_key(key)
        existing: UserPreference | None = await user_preference_repository.get_key(db, user_id, key)
        if existing is None:
            return await user_preference_repository.create(db, {"user_id": user_id, "key": key, "value": value})
        return await user_preference_repository.update(db, existing, {"value": value})

    async def delete(self, db: AsyncSession, user_id: UUID, key: str) -> None:
        existing: UserPreference | None = await user_preference_repository.get_key(db, user_id, key)
        if existing is None:
            raise NotFoundError("Tercih bulunamadı (Preference not found)")
        await user_preference_repository.delete(db, existing)


preference_service: PreferenceService = PreferenceService()
