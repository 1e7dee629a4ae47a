"""
NotificationServiceのユニットテスト
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from floodwatch.models.weather import AlertLevel, AlertMessage
from floodwatch.services.email_service import EmailDeliveryError
from floodwatch.services.notification_service import NotificationService
from floodwatch.services.registration_service import RegistrationStoreError


class TestNotificationService:
    """NotificationServiceのテストクラス"""

    @pytest.fixture
    def registration_service(self):
        service = MagicMock()
        service.find_subscribers = AsyncMock(return_value=[])
        return service

    @pytest.fixture
    def email_service(self):
        service = MagicMock()
        service.send_email = AsyncMock(return_value="msg_1")
        return service

    @pytest.fixture
    def notification_service(self, registration_service, email_service):
        return NotificationService(registration_service, email_service)

    @pytest.fixture
    def alert(self):
        return AlertMessage(
            location="Mumbai",
            alert_level=AlertLevel.CRITICAL,
            title="🚨 CRITICAL FLOOD ALERT - Mumbai",
            message="Move to higher ground",
        )

    @pytest.mark.asyncio
    async def test_no_subscribers(self, notification_service, registration_service, email_service, alert):
        """購読者がいない場合は送信しない"""
        result = await notification_service.send_location_alert(alert)

        registration_service.find_subscribers.assert_awaited_once_with("Mumbai", AlertLevel.CRITICAL)
        email_service.send_email.assert_not_called()
        assert result.total_registrations == 0
        assert result.emails_sent == 0
        assert result.results == []

    @pytest.mark.asyncio
    async def test_sends_to_each_subscriber(
        self, notification_service, registration_service, email_service, alert, test_data_factory
    ):
        registration_service.find_subscribers.return_value = [
            test_data_factory.create_registration(id=1, email="a@example.com"),
            test_data_factory.create_registration(id=2, email="b@example.com"),
        ]

        result = await notification_service.send_location_alert(alert)

        assert email_service.send_email.await_count == 2
        assert result.emails_sent == 2
        assert result.emails_failed == 0
        assert result.total_registrations == 2

        kwargs = email_service.send_email.call_args_list[0][1]
        assert kwargs['subject'] == "🚨 CRITICAL FLOOD ALERT - Mumbai"
        assert kwargs['sender'] == "FloodWatch System <noreply@resend.dev>"

    @pytest.mark.asyncio
    async def test_skips_registrations_without_email_channel(
        self, notification_service, registration_service, email_service, alert, test_data_factory
    ):
        """メール通知を選択していない登録には送信しない"""
        registration_service.find_subscribers.return_value = [
            test_data_factory.create_registration(id=1, email="a@example.com"),
            test_data_factory.create_registration(id=2, email="push@example.com", notify_email=False),
        ]

        result = await notification_service.send_location_alert(alert)

        assert email_service.send_email.await_count == 1
        assert email_service.send_email.call_args[1]['to'] == "a@example.com"
        assert result.total_registrations == 2
        assert len(result.results) == 1

    @pytest.mark.asyncio
    async def test_partial_failure_does_not_stop_other_sends(
        self, notification_service, registration_service, email_service, alert, test_data_factory
    ):
        """1件の送信失敗が他の宛先に影響しない"""
        registration_service.find_subscribers.return_value = [
            test_data_factory.create_registration(id=1, email="a@example.com"),
            test_data_factory.create_registration(id=2, email="b@example.com"),
            test_data_factory.create_registration(id=3, email="c@example.com"),
        ]

        async def send_email(to, subject, html, sender):
            if to == "b@example.com":
                raise EmailDeliveryError("Email API error (500)")
            return f"id-{to}"

        email_service.send_email.side_effect = send_email

        result = await notification_service.send_location_alert(alert)

        assert email_service.send_email.await_count == 3
        assert result.emails_sent == 2
        assert result.emails_failed == 1

        failed = [r for r in result.results if not r.success]
        assert failed[0].email == "b@example.com"
        assert failed[0].to_dict() == {
            'email': "b@example.com",
            'success': False,
            'error': "Email API error (500)",
        }

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self, notification_service, registration_service, alert):
        registration_service.find_subscribers.side_effect = RegistrationStoreError("db down")

        with pytest.raises(RegistrationStoreError):
            await notification_service.send_location_alert(alert)

    @pytest.mark.asyncio
    async def test_registration_confirmation_never_raises(
        self, notification_service, email_service, test_data_factory
    ):
        email_service.send_email.side_effect = EmailDeliveryError("Resend API key not configured")

        result = await notification_service.send_registration_confirmation(
            test_data_factory.create_registration()
        )

        assert result.success is False
        assert "not configured" in result.error

    @pytest.mark.asyncio
    async def test_registration_confirmation_subject(
        self, notification_service, email_service, test_data_factory
    ):
        result = await notification_service.send_registration_confirmation(
            test_data_factory.create_registration()
        )

        assert result.success is True
        kwargs = email_service.send_email.call_args[1]
        assert kwargs['subject'] == "Registration Confirmed - Weather Alert System"
        assert kwargs['sender'] == "Weather Forecasting System <onboarding@resend.dev>"
