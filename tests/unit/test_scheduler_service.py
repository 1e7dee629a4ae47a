"""
MonitorSchedulerのテスト
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from floodwatch.services.scheduler_service import MONITOR_JOB_ID, MonitorScheduler


class TestMonitorScheduler:
    """MonitorSchedulerのテストクラス"""

    @pytest.fixture
    def monitor_service(self):
        service = MagicMock()
        service.run_monitoring_pass = AsyncMock(return_value=MagicMock(locations_checked=2))
        return service

    @pytest.mark.asyncio
    async def test_disabled_when_interval_is_zero(self, monitor_service):
        """間隔0ではスケジューラーを開始しない"""
        scheduler = MonitorScheduler(monitor_service, 0)

        await scheduler.start()

        assert not scheduler.enabled
        assert not scheduler.is_running()
        assert scheduler.get_scheduler_status()['next_jobs'] == []

    @pytest.mark.asyncio
    async def test_start_and_stop(self, monitor_service):
        scheduler = MonitorScheduler(monitor_service, 15)

        await scheduler.start()
        try:
            assert scheduler.is_running()
            status = scheduler.get_scheduler_status()
            assert status['interval_minutes'] == 15
            assert status['next_jobs'][0]['job_id'] == MONITOR_JOB_ID
            assert status['next_jobs'][0]['next_run'] is not None
        finally:
            await scheduler.stop()

        assert not scheduler.is_running()

    @pytest.mark.asyncio
    async def test_scheduled_pass_runs_monitor(self, monitor_service):
        scheduler = MonitorScheduler(monitor_service, 15)

        await scheduler._run_scheduled_pass()

        monitor_service.run_monitoring_pass.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scheduled_pass_swallows_errors(self, monitor_service):
        """定期実行の失敗はログのみ"""
        monitor_service.run_monitoring_pass.side_effect = RuntimeError("db down")
        scheduler = MonitorScheduler(monitor_service, 15)

        await scheduler._run_scheduled_pass()
