"""環境設定ユーティリティ"""

import os
import platform
import sys
from typing import Any, Dict

import psutil

from floodwatch.config import Config


def get_environment_info(config: Config) -> Dict[str, Any]:
    """実行環境の情報を取得"""
    return {
        "environment": config.ENVIRONMENT,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "platform": platform.platform(),
        "processor": platform.processor(),
        "cpu_count": psutil.cpu_count(logical=True),
        "memory_total_gb": round(psutil.virtual_memory().total / (1024 ** 3), 2),
        "monitor_interval_minutes": config.MONITOR_INTERVAL_MINUTES,
        "docker": is_docker(),
    }


def is_production(config: Config) -> bool:
    """本番環境かどうかを判定"""
    return config.ENVIRONMENT == 'production'


def is_docker() -> bool:
    """Dockerコンテナ内で実行されているかどうかを判定"""
    if os.path.exists('/.dockerenv'):
        return True
    if not os.path.isfile('/proc/self/cgroup'):
        return False
    with open('/proc/self/cgroup', encoding='utf-8') as cgroup:
        return any('docker' in line for line in cgroup)
