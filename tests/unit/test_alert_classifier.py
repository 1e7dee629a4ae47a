"""
警報判定のユニットテスト
"""

import pytest

from floodwatch.models.weather import AlertLevel, AlertThresholds
from floodwatch.services.alert_classifier import (
    describe_conditions,
    determine_alert_level,
    generate_alert_message,
)


class TestDetermineAlertLevel:
    """determine_alert_level のテストクラス"""

    @pytest.fixture
    def factory(self, test_data_factory):
        return test_data_factory

    @pytest.mark.parametrize("rainfall, wind_speed, humidity, expected", [
        (60, 10, 50, AlertLevel.CRITICAL),
        (30, 10, 50, AlertLevel.WARNING),
        (5, 10, 40, AlertLevel.SAFE),
        (0, 80, 50, AlertLevel.CRITICAL),
        (0, 50, 50, AlertLevel.WARNING),
        (0, 10, 95, AlertLevel.CRITICAL),
        (0, 10, 85, AlertLevel.WARNING),
    ])
    def test_classification(self, factory, rainfall, wind_speed, humidity, expected):
        """降水量・風速・湿度による判定"""
        sample = factory.create_sample(rainfall=rainfall, wind_speed=wind_speed, humidity=humidity)
        assert determine_alert_level(sample) == expected

    def test_rainfall_boundary_is_inclusive(self, factory):
        """しきい値ちょうどは上位レベルになる"""
        at_threshold = factory.create_sample(rainfall=50.0, humidity=40)
        below_threshold = factory.create_sample(rainfall=49.9, humidity=40)

        assert determine_alert_level(at_threshold) == AlertLevel.CRITICAL
        assert determine_alert_level(below_threshold) == AlertLevel.WARNING

    def test_ignores_temperature_and_pressure(self, factory):
        """気温・気圧は判定に影響しない"""
        hot = factory.create_sample(temperature=48.0, pressure=900.0, humidity=40)
        assert determine_alert_level(hot) == AlertLevel.SAFE

    def test_custom_thresholds(self, factory):
        """しきい値の差し替え"""
        thresholds = AlertThresholds(critical_rainfall=10, warning_rainfall=5)
        sample = factory.create_sample(rainfall=12, humidity=40)
        assert determine_alert_level(sample, thresholds) == AlertLevel.CRITICAL


class TestGenerateAlertMessage:
    """generate_alert_message のテストクラス"""

    @pytest.fixture
    def factory(self, test_data_factory):
        return test_data_factory

    def test_critical_message(self, factory):
        sample = factory.create_sample(rainfall=60, wind_speed=45.36, humidity=90)
        alert = generate_alert_message(sample, AlertLevel.CRITICAL)

        assert alert.title == "🚨 CRITICAL FLOOD ALERT - Mumbai"
        assert alert.message.startswith("IMMEDIATE ACTION REQUIRED!")
        assert "Heavy rainfall: 60mm/hr" in alert.message
        assert "Strong winds: 45.4 km/h" in alert.message
        assert "High humidity: 90%" in alert.message
        assert alert.alert_level == AlertLevel.CRITICAL

    def test_warning_message(self, factory):
        sample = factory.create_sample(rainfall=30)
        alert = generate_alert_message(sample, AlertLevel.WARNING)

        assert alert.title == "⚠️ FLOOD WARNING - Mumbai"
        assert "potential flooding risk" in alert.message

    def test_safe_message(self, factory):
        sample = factory.create_sample(rainfall=0, temperature=28.0, humidity=40)
        alert = generate_alert_message(sample, AlertLevel.SAFE)

        assert alert.title == "✅ Weather Update - Mumbai"
        assert "Temperature: 28°C" in alert.message

    def test_conditions_snapshot(self, factory):
        sample = factory.create_sample(rainfall=12.34, wind_speed=20.0, humidity=70, pressure=1008)
        conditions = generate_alert_message(sample, AlertLevel.WARNING).conditions

        assert conditions.water_level == "12.3mm rainfall/hour"
        assert conditions.rainfall == "12.3mm in last hour"
        assert conditions.wind_speed == "20 km/h"
        assert conditions.humidity == "70%"
        assert conditions.pressure == "1008 hPa"

    def test_dry_conditions_report_normal_water_level(self, factory):
        sample = factory.create_sample(rainfall=0)
        conditions = generate_alert_message(sample, AlertLevel.SAFE).conditions
        assert conditions.water_level == "Normal"

    def test_describe_conditions_empty_when_calm(self, factory):
        sample = factory.create_sample(rainfall=0, wind_speed=10, humidity=50)
        assert describe_conditions(sample) == []
