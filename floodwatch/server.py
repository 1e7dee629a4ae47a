"""FloodWatch警報サービスのメインエントリーポイント"""

import logging
from dataclasses import dataclass
from typing import Optional

from aiohttp import web

from floodwatch.config import Config
from floodwatch.database import DatabaseManager
from floodwatch.handlers.alert_handlers import AlertHandlers
from floodwatch.handlers.common import cors_middleware, error_middleware
from floodwatch.handlers.health_handlers import HealthHandlers
from floodwatch.handlers.monitor_handlers import MonitorHandlers
from floodwatch.handlers.registration_handlers import RegistrationHandlers
from floodwatch.services.email_service import EmailService
from floodwatch.services.monitor_service import WeatherMonitorService
from floodwatch.services.notification_service import NotificationService
from floodwatch.services.registration_service import RegistrationService
from floodwatch.services.scheduler_service import MonitorScheduler
from floodwatch.services.weather_service import WeatherService
from floodwatch.utils.environment import get_environment_info, is_production
from floodwatch.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """アプリケーションが使用するサービス群"""
    db_manager: DatabaseManager
    weather_service: WeatherService
    email_service: EmailService
    registration_service: RegistrationService
    notification_service: NotificationService
    monitor_service: WeatherMonitorService
    scheduler: MonitorScheduler


SERVICES_KEY = web.AppKey("services", ServiceContainer)
CONFIG_KEY = web.AppKey("config", Config)


def build_services(config: Config) -> ServiceContainer:
    """設定からサービス群を組み立てる"""
    db_manager = DatabaseManager(config.DATABASE_URL, config.ENVIRONMENT)
    weather_service = WeatherService(config.OPENWEATHER_API_KEY, config.OPENWEATHER_BASE_URL)
    email_service = EmailService(config.RESEND_API_KEY, config.RESEND_BASE_URL)

    registration_service = RegistrationService(db_manager)
    notification_service = NotificationService(
        registration_service,
        email_service,
        alert_sender=config.ALERT_EMAIL_FROM,
        registration_sender=config.REGISTRATION_EMAIL_FROM,
    )
    monitor_service = WeatherMonitorService(
        registration_service,
        weather_service,
        notification_service,
        thresholds=config.get_alert_thresholds(),
    )
    scheduler = MonitorScheduler(monitor_service, config.MONITOR_INTERVAL_MINUTES)

    return ServiceContainer(
        db_manager=db_manager,
        weather_service=weather_service,
        email_service=email_service,
        registration_service=registration_service,
        notification_service=notification_service,
        monitor_service=monitor_service,
        scheduler=scheduler,
    )


async def _on_startup(app: web.Application) -> None:
    """起動時の初期化処理"""
    services = app[SERVICES_KEY]
    config = app[CONFIG_KEY]

    missing_vars = config.get_missing_vars()
    if missing_vars:
        logger.warning(f"未設定の環境変数があります: {', '.join(missing_vars)}")

    if not services.db_manager.is_initialized():
        await services.db_manager.initialize()
    await services.db_manager.create_tables()
    logger.info("データベースを初期化しました")

    await services.weather_service.start_session()
    await services.email_service.start_session()

    try:
        await services.scheduler.start()
    except Exception as e:
        logger.error(f"スケジューラーの開始に失敗しました: {e}")
        if is_production(config):
            raise


async def _on_cleanup(app: web.Application) -> None:
    """シャットダウン処理"""
    services = app[SERVICES_KEY]
    logger.info("サービスをシャットダウン中...")

    await services.scheduler.stop()
    await services.monitor_service.wait_for_pending_alerts()
    await services.weather_service.close_session()
    await services.email_service.close_session()
    await services.db_manager.close()

    logger.info("シャットダウンが完了しました")


def create_app(services: ServiceContainer, config: Config) -> web.Application:
    """
    aiohttpアプリケーションを作成

    Args:
        services: 使用するサービス群
        config: アプリケーション設定

    Returns:
        web.Application
    """
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[SERVICES_KEY] = services
    app[CONFIG_KEY] = config

    for handlers in (
        AlertHandlers(services),
        RegistrationHandlers(services),
        MonitorHandlers(services),
        HealthHandlers(services),
    ):
        app.add_routes(handlers.routes())

    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    return app


def main(config: Optional[Config] = None) -> None:
    """サービスを起動するメイン関数"""
    config = config or Config()
    setup_logging(config)

    env_info = get_environment_info(config)
    db_info = config.get_database_info()
    logger.info(
        f"環境: {env_info['environment']}, Python: {env_info['python_version']}, "
        f"プラットフォーム: {env_info['platform']}"
    )
    logger.info(f"データベース: {db_info['type']} ({db_info['name']})")

    app = create_app(build_services(config), config)
    web.run_app(app, host=config.HOST, port=config.PORT, print=None)


if __name__ == "__main__":
    main()
