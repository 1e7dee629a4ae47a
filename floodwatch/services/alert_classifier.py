"""
警報判定

気象データをしきい値と比較して警報レベルを決定し、配信用のメッセージを作成する。
どの関数も副作用を持たない。
"""

from typing import List

from ..models.weather import (
    AlertConditions,
    AlertLevel,
    AlertMessage,
    AlertThresholds,
    WeatherSample,
    format_number,
)

DEFAULT_THRESHOLDS = AlertThresholds()

# メッセージ本文に状況として記載する下限値
NOTABLE_WIND_SPEED = 40.0  # km/h
NOTABLE_HUMIDITY = 80.0  # %


def determine_alert_level(
    sample: WeatherSample,
    thresholds: AlertThresholds = DEFAULT_THRESHOLDS
) -> AlertLevel:
    """
    気象データから警報レベルを決定

    降水量・風速・湿度のいずれかがしきい値以上ならそのレベルとなる（境界値を含む）。

    Args:
        sample: 気象データ
        thresholds: 判定しきい値

    Returns:
        AlertLevel
    """
    if (
        sample.rainfall >= thresholds.critical_rainfall
        or sample.wind_speed >= thresholds.critical_wind_speed
        or sample.humidity >= thresholds.critical_humidity
    ):
        return AlertLevel.CRITICAL

    if (
        sample.rainfall >= thresholds.warning_rainfall
        or sample.wind_speed >= thresholds.warning_wind_speed
        or sample.humidity >= thresholds.warning_humidity
    ):
        return AlertLevel.WARNING

    return AlertLevel.SAFE


def describe_conditions(sample: WeatherSample) -> List[str]:
    """メッセージに記載する注目すべき状況"""
    conditions = []
    if sample.rainfall > 0:
        conditions.append(f"Heavy rainfall: {format_number(sample.rainfall)}mm/hr")
    if sample.wind_speed > NOTABLE_WIND_SPEED:
        conditions.append(f"Strong winds: {format_number(sample.wind_speed)} km/h")
    if sample.humidity > NOTABLE_HUMIDITY:
        conditions.append(f"High humidity: {format_number(sample.humidity)}%")
    return conditions


def generate_alert_message(sample: WeatherSample, alert_level: AlertLevel) -> AlertMessage:
    """
    警報レベルに応じた配信メッセージを作成

    Args:
        sample: 気象データ
        alert_level: 判定済みの警報レベル

    Returns:
        AlertMessage（状況スナップショット付き）
    """
    location = sample.location
    conditions = describe_conditions(sample)
    # 状況が無い場合に空の文を残さない
    conditions_text = f" {', '.join(conditions)}." if conditions else ""

    if alert_level == AlertLevel.CRITICAL:
        title = f"🚨 CRITICAL FLOOD ALERT - {location}"
        message = (
            f"IMMEDIATE ACTION REQUIRED! Severe weather conditions detected in {location}."
            f"{conditions_text} Current weather: {sample.description}. "
            "Please move to higher ground immediately and follow evacuation orders."
        )
    elif alert_level == AlertLevel.WARNING:
        title = f"⚠️ FLOOD WARNING - {location}"
        message = (
            f"Weather conditions in {location} indicate potential flooding risk."
            f"{conditions_text} Current weather: {sample.description}. "
            "Please stay alert and avoid low-lying areas."
        )
    else:
        title = f"✅ Weather Update - {location}"
        message = (
            f"Current conditions in {location} are stable. "
            f"Temperature: {format_number(sample.temperature)}°C, "
            f"Humidity: {format_number(sample.humidity)}%, "
            f"Wind: {format_number(sample.wind_speed)} km/h. "
            f"Weather: {sample.description}."
        )

    return AlertMessage(
        location=location,
        alert_level=alert_level,
        title=title,
        message=message,
        conditions=AlertConditions.from_sample(sample),
    )
