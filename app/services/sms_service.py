"""SMS 서비스 — NetGSM XML API를 통한 단건/대량 발송.

SMS delivery through the NetGSM XML API over httpx, plus recipient
resolution for bulk sends. Failures are reported per number and never retried.
"""

import asyncio
import logging
import re
from typing import Sequence
from uuid import UUID
from xml.sax.saxutils import escape

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.personnel import Personnel
from app.repositories.personnel_repository import personnel_repository
from app.utils.exceptions import DownstreamError

logger = logging.getLogger(__name__)

# NetGSM 응답 코드 — NetGSM error codes
_NETGSM_ERRORS: dict[str, str] = {
    "01": "Mesaj gövdesi hatalı veya mesaj metni yoktur",
    "02": "Kullanıcı adı veya şifre hatalı",
    "03": "Kullanıcı adı veya şifre boş",
    "04": "Müşteri aktif değil",
    "05": "Geçersiz numara",
    "06": "Mesaj başlığı onaylanmamış veya geçersiz",
    "07": "Mesaj metni boş",
}
_SUCCESS_PATTERN = re.compile(r"^00\s+(\d+)")
_CDATA_PATTERN = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_COUNTRY_PREFIX = re.compile(r"^(\+90|90|0)")


class InvalidPhoneNumber(ValueError):
    """정규화 불가한 전화번호 — Phone number that cannot be normalized."""


def normalize_phone(phone: str) -> str:
    """전화번호를 10자리 국내 형식으로 정규화합니다.

    Strip a leading +90 / 90 / 0 and all non-digits. The result must be
    exactly 10 digits (e.g. "+90 532 123 45 67" → "5321234567").

    Raises:
        InvalidPhoneNumber: 10자리가 아님 (Not 10 digits after cleaning)
    """
    cleaned: str = re.sub(r"\D", "", _COUNTRY_PREFIX.sub("", phone.strip()))
    if len(cleaned) != 10:
        raise InvalidPhoneNumber("Geçersiz telefon numarası formatı")
    return cleaned


def parse_netgsm_response(body: str) -> tuple[bool, str]:
    """NetGSM 응답 파싱 — (성공 여부, job id 또는 오류 메시지).

    Parse a NetGSM reply. The payload may be bare ("00 123456") or CDATA-wrapped.
    """
    match = _CDATA_PATTERN.search(body)
    payload: str = (match.group(1) if match else body).strip()
    success = _SUCCESS_PATTERN.match(payload)
    if success:
        return True, success.group(1)
    code: str = payload[:2]
    if code in _NETGSM_ERRORS:
        return False, _NETGSM_ERRORS[code]
    return False, f"NetGSM API hatası: {payload[:200]}"


def _cdata(text: str) -> str:
    # "]]>" CDATA 안에서 분할 — Split the terminator so the section stays well-formed
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


class SMSService:
    """NetGSM SMS 서비스.

    Args:
        transport: httpx 전송 계층, 테스트에서 주입 (Injectable httpx transport for tests)
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.transport: httpx.AsyncBaseTransport | None = transport

    def _credentials(self) -> tuple[str, str, str]:
        if not settings.NETGSM_USERNAME or not settings.NETGSM_PASSWORD:
            raise DownstreamError("NetGSM kullanıcı adı ve şifre ayarlanmamış (NetGSM credentials are not configured)")
        return settings.NETGSM_USERNAME, settings.NETGSM_PASSWORD, settings.NETGSM_HEADER or "NETGSM"

    def _build_xml(self, credentials: tuple[str, str, str], phone: str, message: str) -> str:
        username, password, header = credentials
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            "<mainbody><header>"
            "<company>NETGSM</company>"
            f"<usercode>{escape(username)}</usercode>"
            f"<password>{escape(password)}</password>"
            "<type>1:n</type>"
            f"<msgheader>{escape(header)}</msgheader>"
            "</header><body>"
            f"<msg>{_cdata(message)}</msg>"
            f"<no>{phone}</no>"
            "</body></mainbody>"
        )

    async def _send_one(
        self,
        client: httpx.AsyncClient,
        credentials: tuple[str, str, str],
        phone: str,
        message: str,
    ) -> dict:
        result: dict = {"phone": phone, "status": "error", "job_id": None, "message": None}
        try:
            clean: str = normalize_phone(phone)
        except InvalidPhoneNumber as exc:
            result["message"] = str(exc)
            return result

        try:
            response = await client.post(
                settings.NETGSM_API_URL,
                content=self._build_xml(credentials, clean, message).encode("utf-8"),
                headers={"Content-Type": "text/xml; charset=UTF-8"},
            )
        except httpx.HTTPError as exc:
            logger.warning("SMS transport failure phone=%s error=%s", clean, exc)
            result["message"] = "SMS sağlayıcısına ulaşılamadı"
            return result

        ok, detail = parse_netgsm_response(response.text)
        if ok:
            result.update(status="success", job_id=detail, message="SMS başarıyla gönderildi")
        else:
            logger.warning("SMS rejected phone=%s reason=%s", clean, detail)
            result["message"] = detail
        return result

    async def send_sms(self, phone: str, message: str) -> dict:
        """단건 SMS 발송 — Send one SMS.

        Returns:
            dict: {phone, status: "success" | "error", job_id, message}

        Raises:
            DownstreamError: 자격 증명 미설정 (Credentials not configured)
        """
        credentials = self._credentials()
        async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
            return await self._send_one(client, credentials, phone, message)

    async def send_bulk(self, phone_numbers: Sequence[str], message: str) -> dict:
        """대량 SMS를 순차 발송합니다.

        Send one message to many numbers, sequentially, pausing
        ``SMS_SEND_INTERVAL_SECONDS`` between sends.

        Returns:
            dict: {total, success_count, error_count, results, message}

        Raises:
            DownstreamError: 자격 증명 미설정 (Credentials not configured)
        """
        credentials = self._credentials()
        results: list[dict] = []
        async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
            for index, phone in enumerate(phone_numbers):
                if index > 0 and settings.SMS_SEND_INTERVAL_SECONDS > 0:
                    await asyncio.sleep(settings.SMS_SEND_INTERVAL_SECONDS)
                results.append(await self._send_one(client, credentials, phone, message))

        success_count: int = sum(1 for r in results if r["status"] == "success")
        error_count: int = len(results) - success_count
        logger.info("Bulk SMS finished total=%d success=%d error=%d", len(results), success_count, error_count)
        return {
            "total": len(results),
            "success_count": success_count,
            "error_count": error_count,
            "results": results,
            "message": f"{success_count} SMS başarıyla gönderildi, {error_count} hata",
        }

    async def resolve_recipients(
        self,
        db: AsyncSession,
        branch_id: UUID | None = None,
        department_id: UUID | None = None,
        team_id: UUID | None = None,
    ) -> list[str]:
        """대량 SMS 수신자 해석.

        Phone numbers of active personnel with a non-empty phone that match
        every given filter. Duplicates are dropped, order is kept.
        """
        people: Sequence[Personnel] = await personnel_repository.get_active_with_phone(
            db, branch_id=branch_id, department_id=department_id, team_id=team_id
        )
        return list(dict.fromkeys(p.phone.strip() for p in people if p.phone and p.phone.strip()))


sms_service: SMSService = SMSService()
