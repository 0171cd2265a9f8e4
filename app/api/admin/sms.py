"""관리자 SMS 라우터 — NetGSM 단건/대량 발송 API.

Admin SMS Router. Single and bulk sends through NetGSM.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_permission
from app.database import get_db
from app.models.user import User
from app.schemas.sms import BulkSMSRequest, BulkSMSResponse, RecipientPreviewResponse, SMSResult, SMSSendRequest
from app.services.permission_service import Permission
from app.services.sms_service import sms_service
from app.utils.exceptions import ValidationError

router: APIRouter = APIRouter()


@router.post("/send", response_model=SMSResult)
async def send_sms(
    data: SMSSendRequest,
    current_user: Annotated[User, Depends(require_permission(Permission.NOTIFICATIONS))],
) -> dict:
    """단건 SMS 발송 — Send one SMS."""
    return await sms_service.send_sms(data.phone_number, data.message)


@router.post("/send-bulk", response_model=BulkSMSResponse)
async def send_bulk_sms(
    data: BulkSMSRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.NOTIFICATIONS))],
) -> dict:
    """대량 SMS 발송.

    Bulk send. Explicit ``phone_numbers`` take precedence; otherwise the
    recipients are active personnel matching every given filter.

    Raises:
        ValidationError: 수신자 없음 (No recipients)
    """
    phones: list[str] = [p.strip() for p in data.phone_numbers if p.strip()]
    if not phones:
        phones = await sms_service.resolve_recipients(
            db, branch_id=data.branch_id, department_id=data.department_id, team_id=data.team_id
        )
    if not phones:
        raise ValidationError("SMS gönderilecek telefon numarası bulunamadı (No recipients found)")

    return await sms_service.send_bulk(phones, data.message)


@router.get("/recipients", response_model=RecipientPreviewResponse)
async def preview_recipients(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_permission(Permission.NOTIFICATIONS))],
    branch_id: Annotated[UUID | None, Query()] = None,
    department_id: Annotated[UUID | None, Query()] = None,
    team_id: Annotated[UUID | None, Query()] = None,
) -> dict:
    """필터에 해당하는 수신자 미리보기 — Preview bulk recipients."""
    phones = await sms_service.resolve_recipients(
        db, branch_id=branch_id, department_id=department_id, team_id=team_id
    )
    return {"total": len(phones), "phone_numbers": phones}
