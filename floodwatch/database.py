"""Database connection and session management for the FloodWatch alert service."""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Dict, Any

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, DisconnectionError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from floodwatch.config import mask_db_url
from floodwatch.models.registration import Base

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """データベース関連のエラー"""
    pass


class DatabaseConnectionError(DatabaseError):
    """データベース接続エラー"""
    pass


class DatabaseManager:
    """Database connection and session manager."""

    def __init__(self, database_url: str, environment: str = 'development'):
        """Initialize database manager with connection URL."""
        self.database_url = database_url
        self.environment = environment
        self.async_engine = None
        self.async_session_factory = None

        # エラーハンドリング関連
        self._connection_errors = 0
        self._last_error_time = 0.0
        self._is_healthy = False

        # リトライ設定
        self._max_retries = 3
        self._retry_delay = 1.0
        self._backoff_factor = 2.0

    @staticmethod
    def _get_async_url(url: str) -> str:
        """Convert sync database URL to async URL."""
        if url.startswith('sqlite:'):
            return url.replace('sqlite:', 'sqlite+aiosqlite:', 1)
        elif url.startswith('postgresql:'):
            return url.replace('postgresql:', 'postgresql+asyncpg:', 1)
        elif url.startswith('postgres:'):
            return url.replace('postgres:', 'postgresql+asyncpg:', 1)
        return url

    def is_initialized(self) -> bool:
        return self.async_session_factory is not None

    async def initialize(self) -> None:
        """Initialize database connections and session factories."""
        try:
            await self._initialize_with_retry()
            self._is_healthy = True
            self._connection_errors = 0
        except Exception as e:
            logger.error(f"データベースの初期化に失敗しました: {e}")
            self._handle_connection_error()
            raise DatabaseConnectionError(f"データベース初期化エラー: {e}") from e

    def _create_engine(self):
        """接続先に応じたエンジンを作成"""
        async_url = self._get_async_url(self.database_url)

        if async_url.startswith('sqlite'):
            return create_async_engine(
                async_url,
                echo=False,
                poolclass=StaticPool,
                connect_args={
                    "check_same_thread": False,
                    "timeout": 20
                },
            )
        elif async_url.startswith('postgresql'):
            if self.environment == 'production':
                # 本番環境ではより多くのコネクションとタイムアウト設定
                return create_async_engine(
                    async_url,
                    echo=False,
                    pool_size=20,
                    max_overflow=30,
                    pool_pre_ping=True,
                    pool_recycle=1800,  # 30分でコネクションをリサイクル
                    pool_timeout=30,
                    connect_args={
                        "timeout": 10,
                        "server_settings": {
                            "application_name": f"floodwatch_{self.environment}",
                            "statement_timeout": "30000",
                        }
                    }
                )
            return create_async_engine(
                async_url,
                echo=False,
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,
                pool_recycle=3600,
                connect_args={
                    "timeout": 10,
                    "server_settings": {
                        "application_name": f"floodwatch_{self.environment}",
                    }
                }
            )
        raise ValueError(f"未対応のデータベースタイプ: {async_url}")

    async def _initialize_with_retry(self, retries: int = 0) -> None:
        """リトライ機能付きでデータベースを初期化"""
        try:
            if self.async_engine is None:
                self.async_engine = self._create_engine()
                self.async_session_factory = async_sessionmaker(
                    bind=self.async_engine,
                    class_=AsyncSession,
                    expire_on_commit=False
                )

            await self._test_connection()
            logger.info(f"データベースが正常に初期化されました: {mask_db_url(self.database_url)}")

        except ValueError:
            raise
        except Exception as e:
            if retries < self._max_retries:
                delay = self._retry_delay * (self._backoff_factor ** retries)
                logger.warning(f"データベース初期化をリトライします ({retries + 1}/{self._max_retries}) - {delay}秒後")
                await asyncio.sleep(delay)
                await self._initialize_with_retry(retries + 1)
            else:
                raise

    async def _test_connection(self) -> None:
        """データベース接続をテスト"""
        try:
            async with self.async_engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseConnectionError(f"データベース接続テストに失敗: {e}") from e

    def _handle_connection_error(self) -> None:
        """接続エラーを処理"""
        self._connection_errors += 1
        self._last_error_time = time.time()
        self._is_healthy = False
        logger.warning(f"データベース接続エラー (累計 {self._connection_errors} 回)")

    async def create_tables(self) -> None:
        """Create all database tables if they don't exist."""
        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables are ready")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
            raise

    async def drop_tables(self) -> None:
        """Drop all database tables."""
        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
            logger.info("Database tables dropped successfully")
        except Exception as e:
            logger.error(f"Failed to drop database tables: {e}")
            raise

    @asynccontextmanager
    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session context manager."""
        if not self.async_session_factory:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        try:
            async with self.async_session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except (OperationalError, DisconnectionError) as e:
            logger.warning(f"データベースセッションエラー: {e}")
            self._handle_connection_error()
            raise DatabaseConnectionError(f"データベース接続に失敗しました: {e}") from e

        if self._connection_errors > 0 and not self._is_healthy:
            self._is_healthy = True
            logger.info("データベース接続が復旧しました")

    async def close(self) -> None:
        """Close database connections."""
        if self.async_engine:
            await self.async_engine.dispose()
            logger.info("Async database engine disposed")

    async def health_check(self) -> Dict[str, Any]:
        """Check database connection health."""
        try:
            start_time = time.time()

            async with self.get_async_session() as session:
                await session.execute(text("SELECT 1"))

            response_time = time.time() - start_time

            return {
                "status": "healthy",
                "response_time_seconds": round(response_time, 3),
                "connection_errors": self._connection_errors,
            }

        except DatabaseConnectionError:
            return {
                "status": "connection_error",
                "connection_errors": self._connection_errors,
                "last_error_time": self._last_error_time
            }

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "error",
                "error": str(e),
                "connection_errors": self._connection_errors,
            }

    def get_stats(self) -> Dict[str, Any]:
        """データベース統計情報を取得"""
        return {
            "is_healthy": self._is_healthy,
            "connection_errors": self._connection_errors,
            "last_error_time": self._last_error_time,
            "database_url_masked": mask_db_url(self.database_url)
        }
