"""
ヘルスチェック機能を提供するモジュール

コンテナのヘルスチェックから `python -m floodwatch.utils.health` として実行する。
"""

import asyncio
import logging
import sys
from typing import Optional

from floodwatch.config import Config
from floodwatch.database import DatabaseManager

logger = logging.getLogger(__name__)


async def _check_database(config: Config) -> bool:
    db_manager = DatabaseManager(config.DATABASE_URL, config.ENVIRONMENT)
    try:
        await db_manager.initialize()
        status = await db_manager.health_check()
        return status.get('status') == 'healthy'
    finally:
        await db_manager.close()


def check_health(config: Optional[Config] = None) -> bool:
    """
    サービスのヘルスチェックを実行します。

    以下の項目を確認します:
    1. 必要な環境変数が設定されているか
    2. データベースに接続できるか

    Returns:
        bool: ヘルスチェックが成功した場合はTrue、失敗した場合はFalse
    """
    config = config or Config()

    missing_vars = config.get_missing_vars()
    if missing_vars:
        for var in missing_vars:
            logger.error(f"必須環境変数 {var} が設定されていません")
        return False

    try:
        if not asyncio.run(_check_database(config)):
            logger.error("データベースのヘルスチェックに失敗しました")
            return False
    except Exception as e:
        logger.error(f"データベースに接続できません: {e}")
        return False

    logger.info("ヘルスチェック成功: サービスは正常に動作しています")
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    is_healthy = check_health()
    print("ヘルスチェック結果: " + ("成功" if is_healthy else "失敗"))
    sys.exit(0 if is_healthy else 1)
