"""관리자 알림 라우터 — 알림 발송 API.

Admin Notification Router. Creates notifications for everyone, a branch,
a team or one personnel, optionally mirrored by SMS.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.notification import NotificationCreate, NotificationCreateResponse
from app.services.notification_service import notification_service
from app.services.permission_service import Permission

router: APIRouter = APIRouter()


@router.post("", response_model=NotificationCreateResponse, status_code=201)
async def create_notification(
    data: NotificationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.NOTIFICATIONS))],
) -> dict:
    """알림을 생성합니다. ``send_sms``이면 대상에게 SMS도 발송합니다.

    Create a notification. With ``send_sms`` the addressed personnel also
    receive it by SMS and the bulk send summary is returned.

    Args:
        data: 알림 생성 데이터 (Notification data)
        db: 비동기 데이터베이스 세션 (Async database session)
        current_user: 알림 권한 사용자 (User with notifications)

    Returns:
        dict: {notification, sms}
    """
    notification, sms_summary = await notification_service.create(
        db,
        title=data.title,
        message=data.message,
        type=data.type,
        target_type=data.target_type,
        target_id=data.target_id,
        sender_user_id=current_user.id,
        send_sms=data.send_sms,
    )
    await db.commit()

    return {
        "notification": notification_service.build_response(notification),
        "sms": sms_summary,
    }
