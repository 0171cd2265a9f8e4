"""앱 환경설정 라우터 — 사용자별 UI 설정 API.

App Preference Router. Per-user key/value UI state.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.preference import PreferenceResponse, PreferenceSetRequest
from app.services.preference_service import preference_service

router: APIRouter = APIRouter()


@router.get("", response_model=dict[str, Any])
async def get_my_preferences(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return await preference_service.get_all(db, current_user.id)


@router.put("/{key}", response_model=PreferenceResponse)
async def set_my_preference(
    key: str,
    data: PreferenceSetRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """설정값 저장 (덮어쓰기) — Upsert one preference."""
    pref = await preference_service.set(db, current_user.id, key, data.value)
    await db.commit()

    return {"key": pref.key, "value": pref.value}


@router.delete("/{key}", response_model=MessageResponse)
async def delete_my_preference(
    key: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    await preference_service.delete(db, current_user.id, key)
    await db.commit()

    return {"message": "Tercih silindi"}
