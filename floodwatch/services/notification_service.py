"""
通知サービス
地点ごとの警報メール一斉配信と登録確認メールの送信を提供する
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models.registration import Registration
from ..models.weather import AlertLevel, AlertMessage
from ..utils.email_templates import EmailTemplateBuilder
from .email_service import EmailService
from .registration_service import RegistrationService

logger = logging.getLogger(__name__)

DEFAULT_ALERT_SENDER = "FloodWatch System <noreply@resend.dev>"
DEFAULT_REGISTRATION_SENDER = "Weather Forecasting System <onboarding@resend.dev>"


@dataclass
class DeliveryResult:
    """宛先1件分の送信結果"""
    email: str
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'email': self.email, 'success': self.success}
        if self.message_id:
            data['id'] = self.message_id
        if self.error:
            data['error'] = self.error
        return data


@dataclass
class BroadcastResult:
    """警報一斉配信の結果"""
    location: str
    alert_level: AlertLevel
    total_registrations: int
    results: List[DeliveryResult] = field(default_factory=list)

    @property
    def emails_sent(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def emails_failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'location': self.location,
            'alertLevel': self.alert_level.value,
            'emailsSent': self.emails_sent,
            'emailsFailed': self.emails_failed,
            'totalRegistrations': self.total_registrations,
            'results': [result.to_dict() for result in self.results],
        }


class NotificationService:
    """警報メールの配信を管理するサービス"""

    def __init__(
        self,
        registration_service: RegistrationService,
        email_service: EmailService,
        alert_sender: str = DEFAULT_ALERT_SENDER,
        registration_sender: str = DEFAULT_REGISTRATION_SENDER
    ):
        """
        通知サービスを初期化

        Args:
            registration_service: 登録管理サービス
            email_service: メール送信サービス
            alert_sender: 警報メールの送信元
            registration_sender: 登録確認メールの送信元
        """
        self.registration_service = registration_service
        self.email_service = email_service
        self.alert_sender = alert_sender
        self.registration_sender = registration_sender

    async def send_location_alert(self, alert: AlertMessage) -> BroadcastResult:
        """
        地点の購読者に警報メールを一斉送信

        Args:
            alert: 配信する警報

        Returns:
            BroadcastResult: 送信件数・失敗件数と宛先ごとの結果

        Raises:
            RegistrationStoreError: 購読者の取得に失敗した場合
        """
        logger.info(f"{alert.alert_level.value} 警報を送信します: {alert.location} - {alert.title}")

        registrations = await self.registration_service.find_subscribers(alert.location, alert.alert_level)
        result = BroadcastResult(
            location=alert.location,
            alert_level=alert.alert_level,
            total_registrations=len(registrations),
        )

        if not registrations:
            logger.info(f"{alert.location} の {alert.alert_level.value} 警報の購読者はいません")
            return result

        # メール通知を希望する登録のみ
        recipients = [registration for registration in registrations if registration.wants_email()]
        logger.info(f"{alert.location} の購読者 {len(registrations)}人中 {len(recipients)}人にメールを送信します")

        sent_at = datetime.now()
        result.results = list(await asyncio.gather(
            *(self._send_alert_email(registration, alert, sent_at) for registration in recipients)
        ))

        logger.info(
            f"警報を送信しました: {alert.location} - 成功 {result.emails_sent}件, 失敗 {result.emails_failed}件"
        )
        return result

    async def _send_alert_email(
        self,
        registration: Registration,
        alert: AlertMessage,
        sent_at: datetime
    ) -> DeliveryResult:
        """
        1件の警報メールを送信（失敗は結果として返す）

        Args:
            registration: 宛先の登録情報
            alert: 配信する警報
            sent_at: 配信時刻

        Returns:
            DeliveryResult
        """
        try:
            message_id = await self.email_service.send_email(
                to=registration.email,
                subject=EmailTemplateBuilder.build_alert_subject(alert.alert_level, registration.location),
                html=EmailTemplateBuilder.build_alert_email(registration, alert, sent_at),
                sender=self.alert_sender,
            )
            logger.debug(f"警報メール送信成功: {registration.email} (id={message_id})")
            return DeliveryResult(email=registration.email, success=True, message_id=message_id)

        except Exception as e:
            logger.error(f"警報メールの送信に失敗しました: {registration.email} - {e}")
            return DeliveryResult(email=registration.email, success=False, error=str(e))

    async def send_registration_confirmation(self, registration: Registration) -> DeliveryResult:
        """
        登録確認メールを送信（失敗しても例外を送出しない）

        Args:
            registration: 作成済みの登録

        Returns:
            DeliveryResult
        """
        try:
            message_id = await self.email_service.send_email(
                to=registration.email,
                subject=EmailTemplateBuilder.REGISTRATION_SUBJECT,
                html=EmailTemplateBuilder.build_registration_email(registration),
                sender=self.registration_sender,
            )
            logger.info(f"登録確認メールを送信しました: {registration.email}")
            return DeliveryResult(email=registration.email, success=True, message_id=message_id)

        except Exception as e:
            logger.warning(f"登録確認メールの送信に失敗しました: {registration.email} - {e}")
            return DeliveryResult(email=registration.email, success=False, error=str(e))
