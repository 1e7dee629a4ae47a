"""Registration model for the FloodWatch alert service."""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from .errors import ValidationError
from .weather import AlertLevel

Base = declarative_base()

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class NotificationChannels:
    """通知方法の選択"""
    email: bool = False
    sms: bool = False
    push: bool = False

    def any_selected(self) -> bool:
        return self.email or self.sms or self.push

    def labels(self) -> List[str]:
        labels = []
        if self.email:
            labels.append("Email")
        if self.sms:
            labels.append("SMS")
        if self.push:
            labels.append("Push")
        return labels


@dataclass
class AlertSubscriptions:
    """購読する警報レベル"""
    critical: bool = True
    warning: bool = False
    safe: bool = False

    def labels(self) -> List[str]:
        return [level.value.capitalize() for level in AlertLevel if getattr(self, level.value)]


class Registration(Base):
    """Registration model for storing a subscriber's location and preferences."""

    __tablename__ = 'user_registrations'

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Contact information
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(50), nullable=True)

    # Location information
    location = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=True)

    # Notification channels
    notify_email = Column(Boolean, default=False, nullable=False)
    notify_sms = Column(Boolean, default=False, nullable=False)
    notify_push = Column(Boolean, default=False, nullable=False)

    # Alert level subscriptions
    alert_critical = Column(Boolean, default=True, nullable=False)
    alert_warning = Column(Boolean, default=False, nullable=False)
    alert_safe = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=func.now(), nullable=False)

    def __repr__(self) -> str:
        """String representation of Registration model."""
        return (
            f"<Registration(id={self.id}, email='{self.email}', "
            f"location='{self.location}', notify_email={self.notify_email})>"
        )

    @property
    def notification_channels(self) -> NotificationChannels:
        return NotificationChannels(
            email=bool(self.notify_email),
            sms=bool(self.notify_sms),
            push=bool(self.notify_push),
        )

    @property
    def alert_subscriptions(self) -> AlertSubscriptions:
        return AlertSubscriptions(
            critical=bool(self.alert_critical),
            warning=bool(self.alert_warning),
            safe=bool(self.alert_safe),
        )

    def wants_email(self) -> bool:
        return bool(self.notify_email)

    def to_dict(self) -> dict:
        """Convert Registration model to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'location': self.location,
            'state': self.state,
            'notifications': {
                'email': bool(self.notify_email),
                'sms': bool(self.notify_sms),
                'push': bool(self.notify_push),
            },
            'alertLevels': {
                'critical': bool(self.alert_critical),
                'warning': bool(self.alert_warning),
                'safe': bool(self.alert_safe),
            },
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


def _optional_text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    value = value.strip()
    return value or None


def _parse_flags(data: Any, key: str, flag_names: List[str]) -> Dict[str, bool]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"{key} must be an object", field=key)

    flags = {}
    for name in flag_names:
        if name in data:
            if not isinstance(data[name], bool):
                raise ValidationError(f"{key}.{name} must be a boolean", field=key)
            flags[name] = data[name]
    return flags


@dataclass
class RegistrationRequest:
    """検証済みの登録リクエスト"""
    name: str
    email: str
    location: str
    channels: NotificationChannels
    subscriptions: AlertSubscriptions
    phone: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Any) -> 'RegistrationRequest':
        """
        登録フォームのJSONから登録リクエストを作成

        Args:
            data: {name, email, phone?, location, state?, notifications, alertLevels}

        Returns:
            RegistrationRequest

        Raises:
            ValidationError: 必須項目の欠落、不正なメールアドレス、通知方法が未選択の場合
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        required = {}
        for key in ('name', 'email', 'location'):
            value = _optional_text(data, key)
            if not value:
                raise ValidationError("Please fill in all required fields: name, email, location", field=key)
            required[key] = value

        if not EMAIL_PATTERN.match(required['email']):
            raise ValidationError("Invalid email address", field='email')

        channels = NotificationChannels(
            **_parse_flags(data.get('notifications'), 'notifications', ['email', 'sms', 'push'])
        )
        if not channels.any_selected():
            raise ValidationError("Please select at least one notification method", field='notifications')

        subscriptions = AlertSubscriptions(
            **_parse_flags(data.get('alertLevels'), 'alertLevels', ['critical', 'warning', 'safe'])
        )

        return cls(
            name=required['name'],
            email=required['email'],
            location=required['location'],
            channels=channels,
            subscriptions=subscriptions,
            phone=_optional_text(data, 'phone'),
            state=_optional_text(data, 'state'),
        )

    def to_model(self) -> Registration:
        """永続化用のモデルに変換"""
        return Registration(
            name=self.name,
            email=self.email,
            phone=self.phone,
            location=self.location,
            state=self.state,
            notify_email=self.channels.email,
            notify_sms=self.channels.sms,
            notify_push=self.channels.push,
            alert_critical=self.subscriptions.critical,
            alert_warning=self.subscriptions.warning,
            alert_safe=self.subscriptions.safe,
        )
