"""SMS Pydantic 스키마.

SMS request/response schemas.
"""

from uuid import UUID

from pydantic import BaseModel, Field


class SMSSendRequest(BaseModel):
    phone_number: str = Field(min_length=1)
    message: str = Field(min_length=1, max_length=918)


class BulkSMSRequest(BaseModel):
    """대량 SMS 요청.

    Either explicit ``phone_numbers`` or personnel filters. Filters select
    active personnel with a phone number matching every given filter.
    """

    message: str = Field(min_length=1, max_length=918)
    phone_numbers: list[str] = Field(default_factory=list)
    branch_id: UUID | None = None
    department_id: UUID | None = None
    team_id: UUID | None = None


class SMSResult(BaseModel):
    phone: str
    status: str  # "success" | "error"
    job_id: str | None = None
    message: str | None = None


class BulkSMSResponse(BaseModel):
    total: int
    success_count: int
    error_count: int
    results: list[SMSResult]
    message: str


class RecipientPreviewResponse(BaseModel):
    total: int
    phone_numbers: list[str]
