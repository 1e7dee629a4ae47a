"""
スケジューラーサービス
APSchedulerを使用して定期的な気象監視を実行する
"""

import logging
from typing import Any, Dict

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .monitor_service import WeatherMonitorService

logger = logging.getLogger(__name__)

MONITOR_JOB_ID = "weather_monitoring"


class MonitorScheduler:
    """定期監視のスケジュール管理を行うサービス"""

    def __init__(self, monitor_service: WeatherMonitorService, interval_minutes: int):
        """
        スケジューラーを初期化

        Args:
            monitor_service: 気象監視サービス
            interval_minutes: 監視間隔（分）。0以下で無効
        """
        self.monitor_service = monitor_service
        self.interval_minutes = interval_minutes

        jobstores = {
            'default': MemoryJobStore()
        }
        executors = {
            'default': AsyncIOExecutor()
        }
        job_defaults = {
            'coalesce': True,
            'max_instances': 1
        }

        self.scheduler = AsyncIOScheduler(
            jobstores=jobstores,
            executors=executors,
            job_defaults=job_defaults,
            timezone='UTC'
        )

        self._is_running = False

    @property
    def enabled(self) -> bool:
        return self.interval_minutes > 0

    async def start(self) -> None:
        """スケジューラーを開始"""
        if not self.enabled:
            logger.info("定期監視は無効です (MONITOR_INTERVAL_MINUTES=0)")
            return

        if self._is_running:
            return

        try:
            self.scheduler.add_job(
                func=self._run_scheduled_pass,
                trigger=IntervalTrigger(minutes=self.interval_minutes, timezone='UTC'),
                id=MONITOR_JOB_ID,
                name="Weather monitoring pass",
                replace_existing=True
            )
            self.scheduler.start()
            self._is_running = True
            logger.info(f"定期監視を開始しました: {self.interval_minutes}分間隔")

        except Exception as e:
            logger.error(f"スケジューラーの開始に失敗しました: {e}")
            self._is_running = False
            raise

    async def stop(self) -> None:
        """スケジューラーを停止"""
        if self._is_running:
            self.scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("スケジューラーを停止しました")

    def is_running(self) -> bool:
        """スケジューラーが実行中かどうか"""
        return self._is_running and self.scheduler.running

    async def _run_scheduled_pass(self) -> None:
        """スケジュールされた監視を実行（例外は記録のみ）"""
        try:
            report = await self.monitor_service.run_monitoring_pass()
            logger.info(f"定期監視が完了しました: {report.locations_checked}地点")
        except Exception as e:
            logger.error(f"定期監視中にエラーが発生しました: {e}", exc_info=True)

    def get_scheduler_status(self) -> Dict[str, Any]:
        """
        スケジューラーの状態情報を取得

        Returns:
            Dict: スケジューラーの状態情報
        """
        jobs = self.scheduler.get_jobs() if self._is_running else []

        return {
            'enabled': self.enabled,
            'running': self.is_running(),
            'interval_minutes': self.interval_minutes,
            'next_jobs': [
                {
                    'job_id': job.id,
                    'next_run': job.next_run_time.isoformat() if job.next_run_time else None,
                    'name': job.name
                }
                for job in jobs
            ]
        }
