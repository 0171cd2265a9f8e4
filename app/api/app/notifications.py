"""앱 알림 라우터 — 내 알림 API.

App Notification Router. Notifications visible to the caller and read receipts.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse, PaginatedResponse
from app.schemas.notification import UnreadCountResponse
from app.services.notification_service import notification_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_my_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """내 알림 목록 (읽음 여부 포함) — My notifications with read flags, newest first."""
    rows, total = await notification_service.list_for_user(db, current_user.id, page=page, per_page=per_page)
    return {
        "items": [notification_service.build_response(n, is_read) for n, is_read in rows],
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return {"unread_count": await notification_service.get_unread_count(db, current_user.id)}


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(
    notification_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """알림 읽음 처리 (멱등) — Mark as read; repeating is a no-op."""
    await notification_service.mark_read(db, notification_id, current_user.id)
    await db.commit()

    return {"message": "Bildirim okundu olarak işaretlendi"}
