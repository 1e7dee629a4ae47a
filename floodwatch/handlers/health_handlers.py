"""
ヘルスチェックエンドポイント
"""

from typing import TYPE_CHECKING, List

from aiohttp import web

if TYPE_CHECKING:
    from ..server import ServiceContainer


class HealthHandlers:
    def __init__(self, services: 'ServiceContainer'):
        self.db_manager = services.db_manager
        self.scheduler = services.scheduler

    def routes(self) -> List[web.RouteDef]:
        return [web.get('/health', self.health)]

    async def health(self, request: web.Request) -> web.Response:
        """GET /health - データベース接続とスケジューラーの状態"""
        database = await self.db_manager.health_check()
        healthy = database.get('status') == 'healthy'

        return web.json_response(
            {
                'success': healthy,
                'status': 'healthy' if healthy else 'unhealthy',
                'database': database,
                'stats': self.db_manager.get_stats(),
                'scheduler': self.scheduler.get_scheduler_status(),
            },
            status=200 if healthy else 503
        )
