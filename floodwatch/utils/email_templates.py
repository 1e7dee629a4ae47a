"""通知メール作成用のユーティリティ"""

from datetime import datetime
from html import escape
from typing import Optional

from floodwatch.models.registration import Registration
from floodwatch.models.weather import AlertConditions, AlertLevel, AlertMessage


class EmailTemplateBuilder:
    """警報メール・登録確認メールのHTML作成クラス"""

    ALERT_COLORS = {
        AlertLevel.CRITICAL: "#dc2626",
        AlertLevel.WARNING: "#f59e0b",
        AlertLevel.SAFE: "#10b981",
    }

    ALERT_ICONS = {
        AlertLevel.CRITICAL: "🚨",
        AlertLevel.WARNING: "⚠️",
        AlertLevel.SAFE: "✅",
    }

    # (背景色, 文字色)
    CALLOUT_COLORS = {
        AlertLevel.CRITICAL: ("#fef2f2", "#7f1d1d"),
        AlertLevel.WARNING: ("#fffbeb", "#92400e"),
        AlertLevel.SAFE: ("#f0fdf4", "#14532d"),
    }

    # (見出し, 行動指針)
    CALLOUT_TEXT = {
        AlertLevel.CRITICAL: (
            "🚨 IMMEDIATE ACTION REQUIRED",
            "Follow evacuation orders immediately. Move to higher ground.",
        ),
        AlertLevel.WARNING: (
            "⚠️ STAY ALERT AND PREPARED",
            "Monitor conditions closely and be ready to take action.",
        ),
        AlertLevel.SAFE: (
            "✅ CONDITIONS ARE IMPROVING",
            "Continue to stay informed but risk levels are decreasing.",
        ),
    }

    REGISTRATION_SUBJECT = "Registration Confirmed - Weather Alert System"

    @classmethod
    def build_alert_subject(cls, alert_level: AlertLevel, location: str) -> str:
        """警報メールの件名を作成"""
        level = AlertLevel.parse(alert_level)
        return f"{cls.ALERT_ICONS[level]} {level.value.upper()} FLOOD ALERT - {location}"

    @classmethod
    def _build_conditions_html(cls, conditions: Optional[AlertConditions]) -> str:
        if conditions is None or conditions.is_empty():
            return ""

        items = "\n".join(
            f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>"
            for label, value in conditions.items()
        )
        return f"""
            <div style="background: #f1f5f9; padding: 15px; border-radius: 8px; margin: 15px 0;">
              <h4 style="color: #1e293b; margin-top: 0;">Current Conditions:</h4>
              <ul style="color: #475569; margin: 0;">
                {items}
              </ul>
            </div>
        """

    @classmethod
    def build_alert_email(
        cls,
        registration: Registration,
        alert: AlertMessage,
        sent_at: Optional[datetime] = None
    ) -> str:
        """
        警報メールのHTML本文を作成

        Args:
            registration: 宛先の登録情報
            alert: 配信する警報
            sent_at: 送信時刻（フッターに表示）

        Returns:
            HTML文字列
        """
        level = AlertLevel.parse(alert.alert_level)
        color = cls.ALERT_COLORS[level]
        icon = cls.ALERT_ICONS[level]
        callout_bg, callout_fg = cls.CALLOUT_COLORS[level]
        callout_title, callout_body = cls.CALLOUT_TEXT[level]
        location = escape(registration.location)
        timestamp = (sent_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

        return f"""
          <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background: {color}; padding: 25px; border-radius: 10px; text-align: center; margin-bottom: 20px;">
              <h1 style="color: white; margin: 0; font-size: 24px;">{icon} FLOOD ALERT</h1>
              <p style="color: white; margin: 10px 0 0 0; font-size: 18px; font-weight: bold;">
                {level.value.upper()} - {location}
              </p>
            </div>

            <div style="background: #f8fafc; padding: 25px; border-radius: 8px; margin-bottom: 20px;">
              <h2 style="color: #1e293b; margin-top: 0;">{escape(alert.title)}</h2>
              <p style="color: #475569; line-height: 1.6; font-size: 16px;">
                Hello {escape(registration.name)},
              </p>
              <p style="color: #475569; line-height: 1.6; font-size: 16px;">
                {escape(alert.message)}
              </p>

              {cls._build_conditions_html(alert.conditions)}

              <div style="background: {callout_bg}; padding: 15px; border-radius: 8px; border-left: 4px solid {color}; margin: 20px 0;">
                <p style="color: {callout_fg}; margin: 0; font-weight: bold;">{callout_title}</p>
                <p style="color: {callout_fg}; margin: 5px 0 0 0;">{callout_body}</p>
              </div>

              <p style="color: #475569; line-height: 1.6; font-size: 14px; margin-top: 20px;">
                This alert was sent because you registered for {level.value} alerts in {location}.
                Stay safe and follow local emergency guidelines.
              </p>
            </div>

            <div style="text-align: center; padding: 20px 0;">
              <div style="background: #1e293b; color: white; padding: 15px; border-radius: 8px;">
                <p style="margin: 0; font-size: 12px;">
                  FloodWatch System | Emergency Alert: {timestamp}
                </p>
              </div>
            </div>
          </div>
        """

    @classmethod
    def build_registration_email(cls, registration: Registration) -> str:
        """登録確認メールのHTML本文を作成"""
        channels = ", ".join(registration.notification_channels.labels()) or "None"
        levels = ", ".join(registration.alert_subscriptions.labels()) or "None"
        state = escape(registration.state) if registration.state else "-"

        return f"""
          <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background: linear-gradient(135deg, #0ea5e9, #0284c7); padding: 30px; border-radius: 10px; text-align: center; margin-bottom: 20px;">
              <h1 style="color: white; margin: 0; font-size: 28px;">🌤️ Weather Forecasting System</h1>
              <p style="color: white; margin: 10px 0 0 0; font-size: 16px;">Weather Forecasting &amp; Flood Monitoring Alert System</p>
            </div>

            <div style="background: #f8fafc; padding: 25px; border-radius: 8px; margin-bottom: 20px;">
              <h2 style="color: #1e293b; margin-top: 0;">Welcome {escape(registration.name)}!</h2>
              <p style="color: #475569; line-height: 1.6;">
                Thank you for registering with FloodWatch System. Your registration has been successfully processed.
              </p>

              <div style="background: white; padding: 20px; border-radius: 8px; border-left: 4px solid #0ea5e9; margin: 20px 0;">
                <h3 style="color: #1e293b; margin-top: 0;">Registration Details:</h3>
                <ul style="color: #475569; line-height: 1.8;">
                  <li><strong>Name:</strong> {escape(registration.name)}</li>
                  <li><strong>Email:</strong> {escape(registration.email)}</li>
                  <li><strong>Location:</strong> {escape(registration.location)}</li>
                  <li><strong>State:</strong> {state}</li>
                  <li><strong>Notification Methods:</strong> {channels}</li>
                  <li><strong>Alert Levels:</strong> {levels}</li>
                </ul>
              </div>

              <div style="background: #fef3c7; padding: 15px; border-radius: 8px; border-left: 4px solid #f59e0b; margin: 20px 0;">
                <p style="color: #92400e; margin: 0;">
                  <strong>⚠️ Important:</strong> You will now receive weather and flood alerts based on your selected preferences.
                  Stay safe and follow emergency protocols when alerts are issued.
                </p>
              </div>
            </div>

            <div style="text-align: center; padding: 20px 0;">
              <div style="background: #1e293b; color: white; padding: 20px; border-radius: 8px;">
                <p style="margin: 0; font-size: 12px; opacity: 0.8;">
                  This is an automated message. Please do not reply to this email.
                </p>
              </div>
            </div>
          </div>
        """
