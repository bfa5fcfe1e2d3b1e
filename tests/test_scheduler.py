import asyncio
import os

from fastapi.testclient import TestClient

from helpers import make_settings
from media_upload.domains.cleanup.in_use import StaticInUseProvider
from media_upload.domains.cleanup.scheduler import JOB_ID, CleanupScheduler
from media_upload.main import create_app


class BlockingProvider:
    def __init__(self, names):
        self.names = set(names)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch(self):
        self.entered.set()
        await self.release.wait()
        return self.names


class FailingProvider:
    async def fetch(self):
        raise ConnectionError("inventory down")


def _touch(directory, *names):
    for name in names:
        (directory / name).write_bytes(b"x")


def test_sweep_uses_provider(tmp_path):
    _touch(tmp_path, "keep.jpg", "drop.jpg")
    cleanup = CleanupScheduler(tmp_path, StaticInUseProvider({"keep.jpg"}))
    assert asyncio.run(cleanup.run_sweep()) is True
    assert os.listdir(tmp_path) == ["keep.jpg"]


def test_sweep_skipped_without_provider(tmp_path):
    _touch(tmp_path, "a.jpg")
    cleanup = CleanupScheduler(tmp_path, None)
    assert asyncio.run(cleanup.run_sweep()) is False
    assert os.listdir(tmp_path) == ["a.jpg"]


def test_sweep_skipped_when_provider_fails(tmp_path):
    _touch(tmp_path, "a.jpg")
    cleanup = CleanupScheduler(tmp_path, FailingProvider())
    assert asyncio.run(cleanup.run_sweep()) is False
    assert os.listdir(tmp_path) == ["a.jpg"]


def test_overlapping_sweep_is_skipped(tmp_path):
    _touch(tmp_path, "a.jpg", "b.jpg")

    async def scenario():
        provider = BlockingProvider({"a.jpg"})
        cleanup = CleanupScheduler(tmp_path, provider)
        first = asyncio.create_task(cleanup.run_sweep())
        await provider.entered.wait()
        assert cleanup.sweep_in_progress
        second = await cleanup.run_sweep()
        provider.release.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert first is True
    assert second is False
    assert os.listdir(tmp_path) == ["a.jpg"]


def test_start_registers_daily_job(tmp_path):
    async def scenario():
        cleanup = CleanupScheduler(tmp_path, None, crontab="0 2 * * *", timezone="UTC")
        cleanup.start()
        try:
            assert cleanup.running
            job = cleanup._scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.next_run_time.hour == 2
            assert job.next_run_time.minute == 0
        finally:
            cleanup.shutdown()
        assert not cleanup.running

    asyncio.run(scenario())


def test_scheduler_follows_app_lifecycle(tmp_path):
    app = create_app(make_settings(tmp_path, CLEANUP_ENABLED=True))
    with TestClient(app) as client:
        assert client.get("/health").json()["scheduler"] is True
    assert app.state.cleanup.running is False


def test_scheduler_disabled_by_config(tmp_path):
    app = create_app(make_settings(tmp_path, CLEANUP_ENABLED=False))
    with TestClient(app) as client:
        assert client.get("/health").json()["scheduler"] is False
