"""
気象監視エンドポイント
"""

from typing import TYPE_CHECKING, List

from aiohttp import web

from .common import json_success

if TYPE_CHECKING:
    from ..server import ServiceContainer


class MonitorHandlers:
    """監視の手動実行を受け付けるハンドラー"""

    def __init__(self, services: 'ServiceContainer'):
        self.monitor_service = services.monitor_service

    def routes(self) -> List[web.RouteDef]:
        return [web.post('/monitor', self.run_monitor)]

    async def run_monitor(self, request: web.Request) -> web.Response:
        """POST /monitor - 全登録地点の監視を1回実行する"""
        report = await self.monitor_service.run_monitoring_pass()
        return json_success({'message': "Weather monitoring completed", **report.to_dict()})
