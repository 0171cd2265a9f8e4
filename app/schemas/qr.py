"""QR 토큰 및 키오스크 화면 Pydantic 스키마.

QR token and kiosk screen request/response schemas.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.config import settings


# === QR 토큰 (QR Token) ===

class QRCodeCreate(BaseModel):
    """수동 QR 토큰 발급 요청.

    Manual token issue request.

    Attributes:
        branch_id: 지점 UUID (Owning branch)
        expiry_minutes: 유효 시간(분) (Validity window in minutes)
    """

    branch_id: UUID
    expiry_minutes: int = Field(default=settings.QR_DEFAULT_EXPIRY_MINUTES, ge=1, le=settings.QR_MAX_EXPIRY_MINUTES)


class QRTokenResponse(BaseModel):
    """QR 토큰 응답 — Token with resolved branch and screen names."""

    id: str
    code: str
    branch_id: str
    branch_name: str | None = None
    screen_id: str | None = None  # 화면 식별자 (Human screen id)
    screen_name: str | None = None
    expires_at: datetime
    is_active: bool
    created_at: datetime
    last_updated: datetime


class QRInvalidateResponse(BaseModel):
    message: str
    deleted_count: int  # 비활성화된 토큰 수 (Tokens deactivated)


class QRValidateRequest(BaseModel):
    code: str = Field(min_length=1)


class QRValidateResponse(BaseModel):
    valid: bool
    expires_at: datetime
    branch_id: str


class QRScanRequest(BaseModel):
    """QR 스캔 요청.

    Scan request. ``personnel_id`` defaults to the caller's own personnel record.
    """

    code: str = Field(min_length=1)
    personnel_id: UUID | None = None


# === QR 화면 (QR Screen) ===

class QRScreenCreate(BaseModel):
    """키오스크 화면 생성 요청.

    Attributes:
        screen_id: 사람이 지정한 화면 식별자 (Human-assigned id used in the kiosk URL)
        access_code: 접근 코드, 생략 시 자동 생성 (Generated when omitted)
    """

    screen_id: str = Field(min_length=1, max_length=100)
    branch_id: UUID
    name: str = Field(min_length=1, max_length=255)
    access_code: str | None = Field(default=None, max_length=32)
    is_active: bool = True


class QRScreenUpdate(BaseModel):
    """키오스크 화면 부분 수정 요청 — ``device_id: null`` unbinds the device."""

    screen_id: str | None = Field(default=None, min_length=1, max_length=100)
    branch_id: UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    access_code: str | None = Field(default=None, max_length=32)
    is_active: bool | None = None
    device_id: str | None = Field(default=None, max_length=100)


class QRScreenResponse(BaseModel):
    """관리자용 화면 응답 — Admin view including the access code."""

    id: str
    screen_id: str
    branch_id: str
    branch_name: str | None = None
    name: str
    access_code: str
    is_active: bool
    device_id: str | None = None
    is_paired: bool
    last_activity: datetime | None = None
    created_at: datetime


class QRScreenPublicResponse(BaseModel):
    """키오스크용 공개 응답 — Public kiosk view, no secrets."""

    screen_id: str
    name: str
    branch_name: str | None = None
    is_active: bool


class PairRequest(BaseModel):
    access_code: str = Field(min_length=1, max_length=32)
    device_id: str = Field(min_length=1, max_length=100)


class PairResponse(BaseModel):
    """페어링 결과 — 디바이스가 로컬에 저장하는 인증 레코드.

    Pairing record the device caches locally.
    """

    screen_id: str
    device_id: str
    authorized_at: datetime


class DeviceStatusResponse(BaseModel):
    screen_id: str
    authorized: bool
    active: bool
    reason: str  # "paired" | "inactive" | "unbound" | "device_mismatch"
