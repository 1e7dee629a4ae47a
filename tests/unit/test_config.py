"""
設定管理とログ設定のテスト
"""

import json
import logging
import os
from unittest.mock import patch

import pytest

from floodwatch.config import Config, mask_db_url
from floodwatch.utils.logging import JSONFormatter, get_context_logger, setup_logging


class TestConfig:
    """Configのテストクラス"""

    def test_defaults(self):
        with patch.dict(os.environ, {'ENVIRONMENT': 'development'}, clear=False):
            os.environ.pop('PORT', None)
            config = Config()

        assert config.PORT == 8080
        assert config.MONITOR_INTERVAL_MINUTES == 0
        thresholds = config.get_alert_thresholds()
        assert thresholds.critical_rainfall == 50
        assert thresholds.warning_humidity == 85

    def test_threshold_overrides(self):
        with patch.dict(os.environ, {'CRITICAL_RAINFALL_MM': '40', 'WARNING_WIND_KMH': 'abc'}):
            config = Config()

        assert config.get_alert_thresholds().critical_rainfall == 40
        # 不正値はデフォルト
        assert config.get_alert_thresholds().warning_wind_speed == 50

    def test_validate_missing_vars(self):
        with patch.dict(os.environ, {'OPENWEATHER_API_KEY': '', 'RESEND_API_KEY': 're_key'}):
            config = Config()

        assert config.get_missing_vars() == ['OPENWEATHER_API_KEY']
        with pytest.raises(ValueError, match="OPENWEATHER_API_KEY"):
            config.validate()

    def test_database_info_masks_password(self):
        with patch.dict(os.environ, {'DATABASE_URL': 'postgresql://user:secret@db:5432/floodwatch'}):
            config = Config()

        info = config.get_database_info()
        assert info['type'] == 'PostgreSQL'
        assert info['name'] == 'floodwatch'
        assert 'secret' not in info['url_masked']

    def test_mask_db_url_without_credentials(self):
        assert mask_db_url('sqlite:///floodwatch.db') == 'sqlite:///floodwatch.db'


class TestLogging:
    """ログ設定のテストクラス"""

    def test_setup_logging_without_file(self):
        with patch.dict(os.environ, {'LOG_FILE': '', 'LOG_LEVEL': 'WARNING'}):
            config = Config()

        logger = setup_logging(config)

        assert logger.name == 'floodwatch'
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_json_formatter_includes_context(self):
        record = logging.LogRecord('floodwatch.test', logging.INFO, __file__, 10, 'hello', None, None)
        record.context = {'location': 'Mumbai'}

        data = json.loads(JSONFormatter().format(record))

        assert data['message'] == 'hello'
        assert data['context'] == {'location': 'Mumbai'}

    def test_context_logger_merges_context(self):
        logger = get_context_logger('floodwatch.test', component='monitor')
        child = logger.with_context(location='Mumbai')

        assert child.context == {'component': 'monitor', 'location': 'Mumbai'}
        assert logger.context == {'component': 'monitor'}
