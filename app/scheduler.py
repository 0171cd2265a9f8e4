"""APScheduler 기반 QR 토큰 회전 스케줄러.

Rotation scheduler. Every ``QR_ROTATION_CHECK_SECONDS`` the job issues a
fresh token for each paired, active screen whose current token is missing
or about to expire, and deactivates expired tokens.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.database import async_session
from app.services.qr_token_service import qr_token_service

logger = logging.getLogger(__name__)

scheduler: AsyncIOScheduler = AsyncIOScheduler()

ROTATION_JOB_ID: str = "qr_screen_token_rotation"


async def rotate_screen_tokens_job(
    session_factory: async_sessionmaker[AsyncSession] = async_session,
) -> int:
    """화면 토큰 회전 작업 — 한 번의 실행 (One rotation pass).

    Returns:
        int: 발급된 토큰 수 (Tokens issued in this pass)
    """
    async with session_factory() as db:
        try:
            issued: int = await qr_token_service.rotate_screen_tokens(db)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("QR token rotation failed")
            raise

    if issued:
        logger.info("QR token rotation issued=%d", issued)
    return issued


def start_scheduler() -> None:
    """스케줄러 시작 (앱 시작 시 호출) — Start the scheduler on app startup."""
    scheduler.add_job(
        rotate_screen_tokens_job,
        trigger="interval",
        seconds=settings.QR_ROTATION_CHECK_SECONDS,
        id=ROTATION_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("Scheduler started, QR rotation every %ss", settings.QR_ROTATION_CHECK_SECONDS)


def stop_scheduler() -> None:
    """스케줄러 정지 (앱 종료 시 호출) — Stop the scheduler on app shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
