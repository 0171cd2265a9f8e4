"""알림 Pydantic 스키마.

Notification schemas.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.sms import BulkSMSResponse


class NotificationCreate(BaseModel):
    """알림 생성 요청.

    Attributes:
        target_id: 대상 ID, target_type이 all이 아니면 필수
                   (Required unless target_type is "all")
        send_sms: 대상 직원에게 SMS로도 발송 (Also deliver by SMS)
    """

    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    type: Literal["info", "warning", "error", "success"] = "info"
    target_type: Literal["all", "branch", "team", "individual"] = "all"
    target_id: UUID | None = None
    send_sms: bool = False


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    type: str
    target_type: str
    target_id: str | None = None
    sender_user_id: str | None = None
    is_read: bool | None = None  # 호출자 기준 읽음 여부 (Read flag for the caller)
    created_at: datetime


class NotificationCreateResponse(BaseModel):
    notification: NotificationResponse
    sms: BulkSMSResponse | None = None


class UnreadCountResponse(BaseModel):
    unread_count: int
