"""
メール送信サービス

Resend の REST API を使ってHTMLメールを送信する
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import aiohttp
from aiohttp import ClientTimeout, ClientError


class EmailDeliveryError(Exception):
    """メール送信に失敗した場合のエラー"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmailService:
    """Resend APIクライアント"""

    BASE_URL = "https://api.resend.com"

    # タイムアウト設定
    REQUEST_TIMEOUT = 30  # 秒
    CONNECT_TIMEOUT = 10

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        """
        Args:
            api_key: Resend APIキー
            base_url: APIのベースURL（テスト用に差し替え可能）
        """
        self.logger = logging.getLogger(__name__)
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_session()

    async def start_session(self):
        """HTTPセッションを開始"""
        if self.session is None or self.session.closed:
            timeout = ClientTimeout(
                total=self.REQUEST_TIMEOUT,
                connect=self.CONNECT_TIMEOUT
            )
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                    'User-Agent': 'FloodWatch/1.0',
                }
            )
            self.logger.info("メールAPIのHTTPセッションを開始しました")

    async def close_session(self):
        """HTTPセッションを終了"""
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.info("メールAPIのHTTPセッションを終了しました")

    @staticmethod
    def _error_message(status: int, body: Any) -> str:
        if isinstance(body, dict) and body.get('message'):
            return f"Email API error ({status}): {body['message']}"
        return f"Email API error ({status})"

    async def send_email(
        self,
        to: Union[str, List[str]],
        subject: str,
        html: str,
        sender: str
    ) -> Optional[str]:
        """
        メールを1通送信する

        Args:
            to: 宛先アドレス
            subject: 件名
            html: HTML本文
            sender: 送信元（"Name <address>" 形式）

        Returns:
            プロバイダが発行したメッセージID

        Raises:
            EmailDeliveryError: 送信に失敗した場合
        """
        if not self.api_key:
            raise EmailDeliveryError("Resend API key not configured")

        if self.session is None or self.session.closed:
            await self.start_session()

        payload: Dict[str, Any] = {
            'from': sender,
            'to': [to] if isinstance(to, str) else list(to),
            'subject': subject,
            'html': html,
        }

        try:
            async with self.session.post(f"{self.base_url}/emails", json=payload) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None

                if 200 <= response.status < 300:
                    message_id = body.get('id') if isinstance(body, dict) else None
                    self.logger.debug(f"メール送信成功: {payload['to']} (id={message_id})")
                    return message_id

                raise EmailDeliveryError(
                    self._error_message(response.status, body),
                    status_code=response.status
                )

        except asyncio.TimeoutError:
            raise EmailDeliveryError("Email API request timed out")
        except ClientError as e:
            raise EmailDeliveryError(f"Email API network error: {e}")
