"""
pytest設定ファイル

全テストで共通して使用されるフィクスチャとセットアップを定義します。
"""

import os
import tempfile

import pytest

from floodwatch.models.registration import Registration
from floodwatch.models.weather import WeatherSample


@pytest.fixture
def temp_database():
    """一時的なテスト用データベース"""
    temp_db = tempfile.NamedTemporaryFile(delete=False, suffix='.db')
    temp_db.close()

    yield temp_db.name

    # クリーンアップ
    try:
        os.unlink(temp_db.name)
    except OSError:
        pass


@pytest.fixture(autouse=True)
def setup_test_environment():
    """テスト環境のセットアップ"""
    original_env = {}
    test_env = {
        'TESTING': 'true',
        'LOG_LEVEL': 'ERROR',
        'LOG_FILE': '',
        'DATABASE_URL': 'sqlite:///test.db',
        'MONITOR_INTERVAL_MINUTES': '0',
    }

    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    # 環境変数を復元
    for key, value in original_env.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


def pytest_configure(config):
    """pytest設定"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "database: mark test as requiring database access"
    )


def pytest_collection_modifyitems(config, items):
    """テスト収集時の処理"""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def suppress_logs():
    """ログ出力を抑制"""
    import logging
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


class TestDataFactory:
    """テストデータ生成用のファクトリクラス"""

    __test__ = False

    @staticmethod
    def create_sample(location="Mumbai", rainfall=0.0, wind_speed=10.0, humidity=50.0,
                      temperature=28.0, description="light rain", pressure=1008.0):
        """WeatherSampleを作成"""
        return WeatherSample(
            location=location,
            temperature=temperature,
            humidity=humidity,
            rainfall=rainfall,
            wind_speed=wind_speed,
            description=description,
            pressure=pressure,
        )

    @staticmethod
    def create_registration(id=1, name="Asha", email="asha@example.com", location="Mumbai",
                            notify_email=True, critical=True, warning=False, safe=False,
                            state="Maharashtra"):
        """Registrationモデルを作成（未保存）"""
        return Registration(
            id=id,
            name=name,
            email=email,
            phone=None,
            location=location,
            state=state,
            notify_email=notify_email,
            notify_sms=False,
            notify_push=not notify_email,
            alert_critical=critical,
            alert_warning=warning,
            alert_safe=safe,
        )


@pytest.fixture
def test_data_factory():
    """テストデータファクトリ"""
    return TestDataFactory
