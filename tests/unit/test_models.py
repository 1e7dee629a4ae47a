"""
リクエストモデルの検証テスト
"""

import pytest

from floodwatch.models.cities import find_city
from floodwatch.models.errors import ValidationError
from floodwatch.models.registration import AlertSubscriptions, RegistrationRequest
from floodwatch.models.weather import AlertConditions, AlertLevel, AlertMessage


def _registration_payload(**overrides):
    payload = {
        'name': 'Asha',
        'email': 'asha@example.com',
        'phone': '+91 98200 00000',
        'location': 'Mumbai',
        'state': 'Maharashtra',
        'notifications': {'email': True, 'sms': False, 'push': False},
        'alertLevels': {'critical': True, 'warning': True, 'safe': False},
    }
    payload.update(overrides)
    return payload


class TestRegistrationRequest:
    """RegistrationRequest の検証テスト"""

    def test_valid_payload(self):
        request = RegistrationRequest.from_payload(_registration_payload())

        assert request.name == 'Asha'
        assert request.channels.email is True
        assert request.subscriptions.warning is True
        assert request.state == 'Maharashtra'

        model = request.to_model()
        assert model.notify_email is True
        assert model.alert_warning is True
        assert model.alert_safe is False

    @pytest.mark.parametrize("missing", ['name', 'email', 'location'])
    def test_missing_required_field(self, missing):
        with pytest.raises(ValidationError) as exc_info:
            RegistrationRequest.from_payload(_registration_payload(**{missing: ''}))
        assert "required fields" in str(exc_info.value)

    def test_invalid_email(self):
        with pytest.raises(ValidationError, match="Invalid email address"):
            RegistrationRequest.from_payload(_registration_payload(email='not-an-email'))

    def test_no_notification_channel(self):
        payload = _registration_payload(notifications={'email': False, 'sms': False, 'push': False})
        with pytest.raises(ValidationError) as exc_info:
            RegistrationRequest.from_payload(payload)
        assert exc_info.value.field == 'notifications'

    def test_non_boolean_flag_rejected(self):
        payload = _registration_payload(notifications={'email': 'yes'})
        with pytest.raises(ValidationError):
            RegistrationRequest.from_payload(payload)

    def test_default_alert_levels(self):
        """alertLevels 省略時は critical のみ"""
        payload = _registration_payload()
        del payload['alertLevels']
        request = RegistrationRequest.from_payload(payload)
        assert request.subscriptions == AlertSubscriptions(critical=True, warning=False, safe=False)


class TestAlertMessage:
    """AlertMessage の検証テスト"""

    def test_valid_payload(self):
        alert = AlertMessage.from_payload({
            'location': 'Mumbai',
            'alertLevel': 'WARNING',
            'title': 'Flood warning',
            'message': 'Stay alert',
            'conditions': {'waterLevel': '2m', 'rainfall': 30},
        })

        assert alert.alert_level == AlertLevel.WARNING
        assert alert.conditions.water_level == '2m'
        assert alert.conditions.rainfall == '30'
        assert alert.conditions.items() == [('Water Level', '2m'), ('Rainfall', '30')]

    def test_unknown_alert_level(self):
        with pytest.raises(ValidationError, match="alertLevel must be one of"):
            AlertMessage.from_payload({
                'location': 'Mumbai', 'alertLevel': 'severe', 'title': 't', 'message': 'm',
            })

    def test_missing_title(self):
        with pytest.raises(ValidationError, match="title is required"):
            AlertMessage.from_payload({'location': 'Mumbai', 'alertLevel': 'critical', 'message': 'm'})

    def test_conditions_must_be_object(self):
        with pytest.raises(ValidationError):
            AlertConditions.from_payload(['rain'])


class TestCities:
    def test_find_city_case_insensitive(self):
        city = find_city('mumbai')
        assert city is not None
        assert city.name == 'Mumbai'

    def test_unknown_city(self):
        assert find_city('Atlantis') is None
