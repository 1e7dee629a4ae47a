"""Configuration management for the FloodWatch alert service."""

import os
from typing import Dict, Any, List
from pathlib import Path
from dotenv import load_dotenv

from floodwatch.models.weather import AlertThresholds

# 環境変数ファイルの読み込み
env_files = ['.env', '.env.local']
for env_file in env_files:
    if os.path.exists(env_file):
        load_dotenv(env_file)
        break


def _get_float(name: str, default: float) -> float:
    """環境変数を数値として取得（不正値はデフォルト）"""
    raw = os.getenv(name, '')
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    """Configuration class for the FloodWatch alert service."""

    REQUIRED_VARS: List[str] = ['OPENWEATHER_API_KEY', 'RESEND_API_KEY']

    def __init__(self):
        """環境変数から設定を読み込み、環境に応じた設定を適用"""
        # 環境設定
        self.ENVIRONMENT: str = os.getenv('ENVIRONMENT', 'development')

        # HTTP server
        self.HOST: str = os.getenv('HOST', '0.0.0.0')
        self.PORT: int = int(os.getenv('PORT', '8080'))

        # Database Configuration
        self.DATABASE_URL: str = os.getenv('DATABASE_URL', 'sqlite:///floodwatch.db')

        # OpenWeather API Configuration
        self.OPENWEATHER_API_KEY: str = os.getenv('OPENWEATHER_API_KEY', '')
        self.OPENWEATHER_BASE_URL: str = os.getenv(
            'OPENWEATHER_BASE_URL', 'https://api.openweathermap.org/data/2.5'
        )

        # Resend e-mail API Configuration
        self.RESEND_API_KEY: str = os.getenv('RESEND_API_KEY', '')
        self.RESEND_BASE_URL: str = os.getenv('RESEND_BASE_URL', 'https://api.resend.com')
        self.ALERT_EMAIL_FROM: str = os.getenv(
            'ALERT_EMAIL_FROM', 'FloodWatch System <noreply@resend.dev>'
        )
        self.REGISTRATION_EMAIL_FROM: str = os.getenv(
            'REGISTRATION_EMAIL_FROM', 'Weather Forecasting System <onboarding@resend.dev>'
        )

        # Alert thresholds
        defaults = AlertThresholds()
        self.CRITICAL_RAINFALL_MM: float = _get_float('CRITICAL_RAINFALL_MM', defaults.critical_rainfall)
        self.WARNING_RAINFALL_MM: float = _get_float('WARNING_RAINFALL_MM', defaults.warning_rainfall)
        self.CRITICAL_WIND_KMH: float = _get_float('CRITICAL_WIND_KMH', defaults.critical_wind_speed)
        self.WARNING_WIND_KMH: float = _get_float('WARNING_WIND_KMH', defaults.warning_wind_speed)
        self.CRITICAL_HUMIDITY: float = _get_float('CRITICAL_HUMIDITY', defaults.critical_humidity)
        self.WARNING_HUMIDITY: float = _get_float('WARNING_HUMIDITY', defaults.warning_humidity)

        # 定期監視（0で無効）
        self.MONITOR_INTERVAL_MINUTES: int = int(os.getenv('MONITOR_INTERVAL_MINUTES', '0'))

        # Logging Configuration
        self.LOG_LEVEL: str = os.getenv('LOG_LEVEL', '')
        self.LOG_FILE: str = os.getenv('LOG_FILE', 'floodwatch.log')

        self._apply_environment_settings()

    def _apply_environment_settings(self):
        """環境に応じた設定を適用"""
        if self.ENVIRONMENT == 'development':
            if not self.LOG_LEVEL:
                self.LOG_LEVEL = 'DEBUG'
        elif self.ENVIRONMENT == 'staging':
            if not self.LOG_LEVEL:
                self.LOG_LEVEL = 'INFO'
        elif self.ENVIRONMENT == 'production':
            if not self.LOG_LEVEL:
                self.LOG_LEVEL = 'WARNING'

        if not self.LOG_LEVEL:
            self.LOG_LEVEL = 'INFO'

        # ログファイルパスの調整
        if self.LOG_FILE and not os.path.isabs(self.LOG_FILE):
            self.LOG_FILE = str(Path('logs') / self.LOG_FILE)

    def get_missing_vars(self) -> List[str]:
        """未設定の必須環境変数を返す"""
        return [var for var in self.REQUIRED_VARS if not getattr(self, var)]

    def validate(self) -> bool:
        """Validate required configuration values."""
        missing_vars = self.get_missing_vars()
        if missing_vars:
            raise ValueError(f"Missing required environment variables: {', '.join(missing_vars)}")
        return True

    def get_alert_thresholds(self) -> AlertThresholds:
        """警報判定のしきい値を取得"""
        return AlertThresholds(
            critical_rainfall=self.CRITICAL_RAINFALL_MM,
            warning_rainfall=self.WARNING_RAINFALL_MM,
            critical_wind_speed=self.CRITICAL_WIND_KMH,
            warning_wind_speed=self.WARNING_WIND_KMH,
            critical_humidity=self.CRITICAL_HUMIDITY,
            warning_humidity=self.WARNING_HUMIDITY,
        )

    def get_database_info(self) -> Dict[str, Any]:
        """データベース設定情報を取得"""
        db_type = "SQLite"
        db_name = "floodwatch.db"

        if "postgresql" in self.DATABASE_URL:
            db_type = "PostgreSQL"
            db_name = self.DATABASE_URL.split("/")[-1]
        elif "sqlite" in self.DATABASE_URL:
            db_path = self.DATABASE_URL.split("///", 1)[-1]
            db_name = os.path.basename(db_path)

        return {
            "type": db_type,
            "name": db_name,
            "url_masked": mask_db_url(self.DATABASE_URL),
        }


def mask_db_url(url: str) -> str:
    """データベースURLの機密情報をマスク"""
    if "@" in url:
        parts = url.split("@")
        if len(parts) == 2:
            auth_part = parts[0]
            if ":" in auth_part.split("://", 1)[-1]:
                protocol_user = auth_part.rsplit(":", 1)[0]
                return f"{protocol_user}:***@{parts[1]}"
    return url

