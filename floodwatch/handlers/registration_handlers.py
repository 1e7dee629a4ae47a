"""
通知登録エンドポイント
"""

import logging
from typing import TYPE_CHECKING, List

from aiohttp import web

from ..models.registration import RegistrationRequest
from .common import json_success, read_json

if TYPE_CHECKING:
    from ..server import ServiceContainer

logger = logging.getLogger(__name__)


class RegistrationHandlers:
    """通知登録を受け付けるハンドラー"""

    def __init__(self, services: 'ServiceContainer'):
        self.registration_service = services.registration_service
        self.notification_service = services.notification_service

    def routes(self) -> List[web.RouteDef]:
        return [web.post('/registrations', self.create_registration)]

    async def create_registration(self, request: web.Request) -> web.Response:
        """
        POST /registrations

        入力を検証して登録を保存し、登録確認メールを送信する。
        確認メールの失敗はリクエストの失敗にしない。
        """
        registration_request = RegistrationRequest.from_payload(await read_json(request))

        registration = await self.registration_service.create_registration(registration_request)
        confirmation = await self.notification_service.send_registration_confirmation(registration)

        if not confirmation.success:
            logger.warning(f"登録は完了しましたが確認メールを送信できませんでした: {registration.email}")

        return json_success(
            {
                'registration': registration.to_dict(),
                'confirmationEmailSent': confirmation.success,
            },
            status=201
        )
