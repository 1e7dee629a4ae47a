"""
気象監視サービス
登録地点の気象状況を確認し、警報レベルに応じて通知を発行する
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..models.weather import AlertLevel, AlertMessage, AlertThresholds
from ..utils.logging import get_context_logger
from .alert_classifier import determine_alert_level, generate_alert_message
from .notification_service import NotificationService
from .registration_service import RegistrationService
from .weather_service import WeatherAPIError, WeatherService

logger = get_context_logger(__name__)


class MonitorConfigurationError(Exception):
    """監視に必要な設定が不足している場合のエラー"""
    pass


class LocationStatus(str, Enum):
    """地点ごとの監視結果"""
    ERROR = "error"
    ALERT_SENT = "alert_sent"
    NORMAL = "normal"


@dataclass
class LocationResult:
    """1地点分の監視結果"""
    location: str
    status: LocationStatus
    alert_level: Optional[AlertLevel] = None
    weather: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'location': self.location, 'status': self.status.value}
        if self.alert_level is not None:
            data['alertLevel'] = self.alert_level.value
        if self.weather is not None:
            data['weather'] = self.weather
        if self.message:
            data['message'] = self.message
        return data


@dataclass
class MonitoringReport:
    """監視1回分の結果"""
    timestamp: datetime
    results: List[LocationResult] = field(default_factory=list)

    @property
    def locations_checked(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'locationsChecked': self.locations_checked,
            'results': [result.to_dict() for result in self.results],
        }


class WeatherMonitorService:
    """気象監視を行うサービス"""

    def __init__(
        self,
        registration_service: RegistrationService,
        weather_service: WeatherService,
        notification_service: NotificationService,
        thresholds: Optional[AlertThresholds] = None
    ):
        """
        Args:
            registration_service: 登録管理サービス
            weather_service: 気象APIサービス
            notification_service: 通知サービス
            thresholds: 警報判定のしきい値
        """
        self.registration_service = registration_service
        self.weather_service = weather_service
        self.notification_service = notification_service
        self.thresholds = thresholds or AlertThresholds()

        # 送信中の警報タスク
        self._pending_alerts: Set[asyncio.Task] = set()

    @property
    def pending_alert_count(self) -> int:
        return len(self._pending_alerts)

    async def run_monitoring_pass(self) -> MonitoringReport:
        """
        全登録地点の気象状況を確認する

        警報の送信完了は待たずに結果を返す。

        Returns:
            MonitoringReport

        Raises:
            MonitorConfigurationError: 気象APIキーが未設定の場合
            RegistrationStoreError: 監視対象地点の取得に失敗した場合
        """
        logger.info("気象監視を開始します")

        if not self.weather_service.is_configured():
            raise MonitorConfigurationError("OpenWeather API key not configured")

        locations = await self.registration_service.get_monitored_locations()
        logger.info(f"{len(locations)}地点を監視します: {locations}")

        results = await asyncio.gather(*(self._check_location(location) for location in locations))
        report = MonitoringReport(timestamp=datetime.now(timezone.utc), results=list(results))

        alert_count = sum(1 for result in report.results if result.status == LocationStatus.ALERT_SENT)
        logger.info(f"気象監視が完了しました: {report.locations_checked}地点, 警報 {alert_count}件")
        return report

    async def _check_location(self, location: str) -> LocationResult:
        """
        1地点の気象状況を確認し、必要なら警報を発行する

        取得失敗はこの地点のエラーとして記録し、他の地点には影響させない。
        """
        location_logger = logger.with_context(location=location)

        try:
            sample = await self.weather_service.get_current_weather(location)
        except WeatherAPIError as e:
            location_logger.error(f"気象データの取得に失敗しました: {location} - {e}")
            return LocationResult(
                location=location,
                status=LocationStatus.ERROR,
                message="Failed to get weather data",
            )

        alert_level = determine_alert_level(sample, self.thresholds)
        location_logger.info(
            f"{location}: {sample.temperature}°C, {sample.rainfall}mm/hr, "
            f"{sample.wind_speed:.1f}km/h - {alert_level.value.upper()}"
        )

        if alert_level.requires_notification:
            self._dispatch_alert(generate_alert_message(sample, alert_level))
            return LocationResult(
                location=location,
                status=LocationStatus.ALERT_SENT,
                alert_level=alert_level,
                weather=sample.snapshot(),
            )

        return LocationResult(
            location=location,
            status=LocationStatus.NORMAL,
            weather=sample.snapshot(),
        )

    def _dispatch_alert(self, alert: AlertMessage) -> None:
        """警報の送信をバックグラウンドで開始"""
        task = asyncio.create_task(self._send_alert_in_background(alert))
        self._pending_alerts.add(task)
        task.add_done_callback(self._pending_alerts.discard)

    async def _send_alert_in_background(self, alert: AlertMessage) -> None:
        try:
            result = await self.notification_service.send_location_alert(alert)
            logger.info(
                f"警報送信結果: {alert.location} - 成功 {result.emails_sent}件, "
                f"失敗 {result.emails_failed}件"
            )
        except Exception as e:
            logger.error(f"警報の送信に失敗しました: {alert.location} - {e}")

    async def wait_for_pending_alerts(self) -> None:
        """送信中の警報タスクの完了を待つ"""
        if self._pending_alerts:
            logger.info(f"送信中の警報 {len(self._pending_alerts)}件の完了を待ちます")
            await asyncio.gather(*list(self._pending_alerts), return_exceptions=True)
