"""QR 토큰 회전 스케줄러 테스트 — Rotation job tests."""

import pytest

from app.scheduler import ROTATION_JOB_ID, rotate_screen_tokens_job, scheduler, start_scheduler, stop_scheduler
from app.services.qr_token_service import qr_token_service


class TestRotationJob:
    async def test_job_issues_and_commits(self, db, session_factory, branch, screen):
        screen.device_id = "device-a"
        await db.commit()

        assert await rotate_screen_tokens_job(session_factory) == 1

        async with session_factory() as other:
            assert await qr_token_service.get_current_for_screen(other, "lobby-1") is not None

    async def test_job_skips_unpaired_screens(self, db, session_factory, branch, screen):
        await db.commit()
        assert await rotate_screen_tokens_job(session_factory) == 0

    async def test_job_failure_propagates(self, session_factory, monkeypatch):
        async def boom(db, now=None):
            raise RuntimeError("db down")

        monkeypatch.setattr(qr_token_service, "rotate_screen_tokens", boom)
        with pytest.raises(RuntimeError):
            await rotate_screen_tokens_job(session_factory)


class TestSchedulerLifecycle:
    async def test_start_registers_job(self):
        start_scheduler()
        try:
            job = scheduler.get_job(ROTATION_JOB_ID)
            assert job is not None
            assert job.max_instances == 1
        finally:
            stop_scheduler()
        assert not scheduler.running


