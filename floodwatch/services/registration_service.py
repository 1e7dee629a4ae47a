"""登録管理サービス - 通知登録の永続化と検索を提供"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from ..database import DatabaseError, DatabaseManager
from ..models.registration import Registration, RegistrationRequest
from ..models.weather import AlertLevel

logger = logging.getLogger(__name__)


class RegistrationStoreError(DatabaseError):
    """登録データの読み書きに失敗した場合のエラー"""
    pass


class RegistrationService:
    """通知登録のデータベース操作を担当するサービスクラス"""

    def __init__(self, db_manager: DatabaseManager):
        """
        Args:
            db_manager: データベース接続マネージャー
        """
        self.db_manager = db_manager

    async def create_registration(self, request: RegistrationRequest) -> Registration:
        """
        新しい登録を作成する

        Args:
            request: 検証済みの登録リクエスト

        Returns:
            作成されたRegistrationオブジェクト

        Raises:
            RegistrationStoreError: 永続化に失敗した場合
        """
        try:
            async with self.db_manager.get_async_session() as session:
                registration = request.to_model()
                session.add(registration)
                await session.flush()
                await session.refresh(registration)

            logger.info(f"新しい登録を作成しました: {registration.email} ({registration.location})")
            return registration

        except (SQLAlchemyError, DatabaseError) as e:
            logger.error(f"登録作成時のデータベースエラー ({request.email}): {e}")
            raise RegistrationStoreError(f"Failed to save registration: {e}") from e

    async def find_subscribers(self, location: str, alert_level: AlertLevel) -> List[Registration]:
        """
        地点と警報レベルに一致する登録を取得する

        Args:
            location: 地点名（完全一致）
            alert_level: 警報レベル（対応する購読フラグが有効な登録のみ）

        Returns:
            一致した登録のリスト

        Raises:
            RegistrationStoreError: 取得に失敗した場合
        """
        level = AlertLevel.parse(alert_level)
        flag_column = getattr(Registration, level.subscription_field)

        try:
            async with self.db_manager.get_async_session() as session:
                stmt = (
                    select(Registration)
                    .where(Registration.location == location)
                    .where(flag_column.is_(True))
                    .order_by(Registration.id)
                )
                result = await session.execute(stmt)
                registrations = list(result.scalars().all())

            logger.debug(f"購読者を取得しました: {location} / {level.value} - {len(registrations)}人")
            return registrations

        except (SQLAlchemyError, DatabaseError) as e:
            logger.error(f"購読者取得時のデータベースエラー ({location}): {e}")
            raise RegistrationStoreError(f"Failed to fetch registrations: {e}") from e

    async def get_monitored_locations(self) -> List[str]:
        """
        登録が1件以上ある地点の一覧を取得する

        Returns:
            重複を除いた地点名のリスト（空文字は除外）

        Raises:
            RegistrationStoreError: 取得に失敗した場合
        """
        try:
            async with self.db_manager.get_async_session() as session:
                stmt = (
                    select(Registration.location)
                    .where(Registration.location != '')
                    .distinct()
                    .order_by(Registration.location)
                )
                result = await session.execute(stmt)
                locations = [location for location in result.scalars().all() if location]

            logger.debug(f"監視対象地点を取得しました: {len(locations)}件")
            return locations

        except (SQLAlchemyError, DatabaseError) as e:
            logger.error(f"監視対象地点取得時のデータベースエラー: {e}")
            raise RegistrationStoreError(f"Failed to fetch locations: {e}") from e

    async def count_registrations(self) -> int:
        """登録件数を取得する"""
        try:
            async with self.db_manager.get_async_session() as session:
                result = await session.execute(select(func.count(Registration.id)))
                return result.scalar() or 0
        except (SQLAlchemyError, DatabaseError) as e:
            logger.error(f"登録件数取得時のデータベースエラー: {e}")
            raise RegistrationStoreError(f"Failed to count registrations: {e}") from e
