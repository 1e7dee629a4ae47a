"""気象データと警報用のモデル定義"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationError


class AlertLevel(str, Enum):
    """警報レベル"""
    CRITICAL = "critical"
    WARNING = "warning"
    SAFE = "safe"

    @classmethod
    def parse(cls, value: Any) -> 'AlertLevel':
        """文字列から警報レベルを取得（不正値はValidationError）"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        allowed = ", ".join(level.value for level in cls)
        raise ValidationError(f"alertLevel must be one of: {allowed}", field="alertLevel")

    @property
    def subscription_field(self) -> str:
        """登録テーブル上の購読フラグ列名"""
        return f"alert_{self.value}"

    @property
    def requires_notification(self) -> bool:
        """監視時に通知を送るレベルかどうか"""
        return self in (AlertLevel.CRITICAL, AlertLevel.WARNING)


@dataclass(frozen=True)
class AlertThresholds:
    """警報判定のしきい値"""
    critical_rainfall: float = 50.0  # mm/hour
    warning_rainfall: float = 25.0
    critical_wind_speed: float = 80.0  # km/h
    warning_wind_speed: float = 50.0
    critical_humidity: float = 95.0  # %
    warning_humidity: float = 85.0


@dataclass
class WeatherSample:
    """ある地点の現在の気象状況"""
    location: str
    temperature: float
    humidity: float
    rainfall: float  # 直近1時間の降水量 (mm)
    wind_speed: float  # km/h
    description: str
    pressure: float

    def snapshot(self) -> Dict[str, Any]:
        """監視結果に含める気象スナップショット"""
        return {
            'temperature': self.temperature,
            'rainfall': self.rainfall,
            'windSpeed': self.wind_speed,
            'humidity': self.humidity,
            'description': self.description,
        }


def format_number(value: float) -> str:
    """小数第1位に丸めて表示用文字列にする"""
    return f"{round(float(value), 1):g}"


@dataclass
class AlertConditions:
    """通知メールに載せる現在の状況"""
    water_level: Optional[str] = None
    rainfall: Optional[str] = None
    temperature: Optional[str] = None
    wind_speed: Optional[str] = None
    humidity: Optional[str] = None
    pressure: Optional[str] = None

    # (属性名, JSONキー, 表示ラベル)
    FIELDS = (
        ('water_level', 'waterLevel', 'Water Level'),
        ('rainfall', 'rainfall', 'Rainfall'),
        ('temperature', 'temperature', 'Temperature'),
        ('wind_speed', 'windSpeed', 'Wind Speed'),
        ('humidity', 'humidity', 'Humidity'),
        ('pressure', 'pressure', 'Pressure'),
    )

    @classmethod
    def from_sample(cls, sample: WeatherSample) -> 'AlertConditions':
        """気象データから状況スナップショットを作成"""
        rainfall = format_number(sample.rainfall)
        return cls(
            water_level=f"{rainfall}mm rainfall/hour" if sample.rainfall > 0 else "Normal",
            rainfall=f"{rainfall}mm in last hour",
            temperature=f"{format_number(sample.temperature)}°C",
            wind_speed=f"{format_number(sample.wind_speed)} km/h",
            humidity=f"{format_number(sample.humidity)}%",
            pressure=f"{format_number(sample.pressure)} hPa",
        )

    @classmethod
    def from_payload(cls, data: Any) -> Optional['AlertConditions']:
        """リクエストJSONから作成"""
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValidationError("conditions must be an object", field="conditions")

        values = {}
        for attr, key, _label in cls.FIELDS:
            value = data.get(key)
            if value is not None and value != "":
                values[attr] = str(value)
        return cls(**values)

    def items(self) -> List[Tuple[str, str]]:
        """設定済みの項目を (ラベル, 値) のリストで返す"""
        return [
            (label, getattr(self, attr))
            for attr, _key, label in self.FIELDS
            if getattr(self, attr)
        ]

    def is_empty(self) -> bool:
        return not self.items()

    def to_dict(self) -> Dict[str, str]:
        return {
            key: getattr(self, attr)
            for attr, key, _label in self.FIELDS
            if getattr(self, attr)
        }


@dataclass
class AlertMessage:
    """地点ごとに配信する警報メッセージ"""
    location: str
    alert_level: AlertLevel
    title: str
    message: str
    conditions: Optional[AlertConditions] = field(default=None)

    @classmethod
    def from_payload(cls, data: Any) -> 'AlertMessage':
        """
        配信リクエストのJSONから警報メッセージを作成

        Args:
            data: {location, alertLevel, title, message, conditions?}

        Returns:
            AlertMessage

        Raises:
            ValidationError: 必須項目の欠落や不正な警報レベル
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        for key in ('location', 'title', 'message'):
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{key} is required", field=key)

        return cls(
            location=data['location'].strip(),
            alert_level=AlertLevel.parse(data.get('alertLevel')),
            title=data['title'].strip(),
            message=data['message'].strip(),
            conditions=AlertConditions.from_payload(data.get('conditions')),
        )
