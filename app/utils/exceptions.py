"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the service's error taxonomy.
Each class carries a stable machine-readable ``code`` next to the user-facing
message so clients can tell apart e.g. an unknown QR code from an expired one.
Messages are user-facing Turkish with an English gloss.

Usage:
    from app.utils.exceptions import NotFoundError, ExpiredQRTokenError
    raise NotFoundError("Şube bulunamadı (Branch not found)")
    raise ExpiredQRTokenError()
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a referenced entity (branch, screen, token, personnel) does not exist.
    """

    code: str = "not_found"

    def __init__(self, detail: str = "Kayıt bulunamadı (Resource not found)") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnknownPersonnelError(NotFoundError):
    """스캔 대상 인사 기록이 없거나 비활성일 때 사용.

    Raised by the attendance recorder when the personnel is missing or inactive.
    """

    code = "unknown_personnel"

    def __init__(self, detail: str = "Personel bulunamadı veya aktif değil (Personnel not found or inactive)") -> None:
        super().__init__(detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 또는 상태 충돌 시 사용.

    Raised when a uniqueness rule is violated (e.g. duplicate screen id).
    """

    code: str = "conflict"

    def __init__(self, detail: str = "Kayıt zaten mevcut (Resource already exists)") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    Raised when the principal lacks the required permission, or a kiosk device
    is not (or no longer) authorized for a screen.
    """

    code: str = "forbidden"

    def __init__(self, detail: str = "Bu işlem için yetkiniz yok (Insufficient permissions)") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when the bearer credential is missing, invalid, or expired.
    """

    code: str = "not_authenticated"

    def __init__(self, detail: str = "Oturum açılmamış (Not authenticated)") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 비즈니스 규칙 위반 시 사용.

    Raised for business rule failures and invalid state transitions
    (e.g. approving a leave request that is no longer pending).
    """

    code: str = "bad_request"

    def __init__(self, detail: str = "Geçersiz istek (Bad request)") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationError(HTTPException):
    """422 예외 — Pydantic 이후 단계의 입력 검증 실패.

    Raised for malformed input that passes schema validation
    (e.g. end date before start date, missing rejection reason).
    """

    code: str = "validation_error"

    def __init__(self, detail: str = "Geçersiz veri (Invalid input)") -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class InvalidQRTokenError(HTTPException):
    """존재하지 않는 QR 코드 스캔 — Scanned code does not exist."""

    code: str = "invalid_token"

    def __init__(self, detail: str = "QR kod bulunamadı (QR code not found)") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ExpiredQRTokenError(HTTPException):
    """만료되었거나 비활성화된 QR 코드 스캔 — Scanned code is inactive or past expiry."""

    code: str = "expired_token"

    def __init__(self, detail: str = "QR kodun süresi dolmuş (QR code has expired)") -> None:
        super().__init__(status_code=status.HTTP_410_GONE, detail=detail)


class DownstreamError(HTTPException):
    """502 Bad Gateway 예외 — 외부 협력 서비스(SMS 등) 실패.

    Raised when an external collaborator (SMS provider) fails or is not configured.
    Never retried automatically.
    """

    code: str = "downstream_failure"

    def __init__(self, detail: str = "Harici servis hatası (Downstream service failure)") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
