"""
警報配信エンドポイント
"""

import logging
from typing import TYPE_CHECKING, List

from aiohttp import web

from ..models.weather import AlertMessage
from .common import json_success, read_json

if TYPE_CHECKING:
    from ..server import ServiceContainer

logger = logging.getLogger(__name__)


class AlertHandlers:
    """警報の一斉配信を受け付けるハンドラー"""

    def __init__(self, services: 'ServiceContainer'):
        self.notification_service = services.notification_service

    def routes(self) -> List[web.RouteDef]:
        return [web.post('/alerts', self.send_alert)]

    async def send_alert(self, request: web.Request) -> web.Response:
        """
        POST /alerts

        指定地点・警報レベルの購読者に警報メールを送信する
        """
        alert = AlertMessage.from_payload(await read_json(request))
        logger.info(f"警報配信リクエスト: {alert.location} ({alert.alert_level.value})")

        result = await self.notification_service.send_location_alert(alert)

        if result.total_registrations == 0:
            message = f"No users registered for {alert.alert_level.value} alerts in {alert.location}"
        else:
            message = "Location alert sent successfully"

        return json_success({'message': message, **result.to_dict()})
