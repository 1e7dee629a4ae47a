"""
OpenWeather APIサービス

登録地点の現在の気象状況を OpenWeather の current weather API から取得するサービス
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..models.cities import CityCoordinates, find_city
from ..models.weather import WeatherSample


class WeatherAPIError(Exception):
    """気象API関連のエラー"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class WeatherAPITimeoutError(WeatherAPIError):
    """タイムアウトエラー"""
    pass


class WeatherService:
    """OpenWeather APIサービス"""

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    # タイムアウト設定
    REQUEST_TIMEOUT = 30  # 秒
    CONNECT_TIMEOUT = 10

    # m/s -> km/h
    MS_TO_KMH = 3.6

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        """
        WeatherServiceの初期化

        Args:
            api_key: OpenWeather APIキー
            base_url: APIのベースURL（テスト用に差し替え可能）
        """
        self.logger = logging.getLogger(__name__)
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """非同期コンテキストマネージャーの開始"""
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """非同期コンテキストマネージャーの終了"""
        await self.close_session()

    def is_configured(self) -> bool:
        return bool(self.api_key)

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
                    'User-Agent': 'FloodWatch/1.0',
                    'Accept': 'application/json',
                }
            )
            self.logger.info("気象APIのHTTPセッションを開始しました")

    async def close_session(self):
        """HTTPセッションを終了"""
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.info("気象APIのHTTPセッションを終了しました")

    def _build_params(self, location: str) -> Dict[str, Any]:
        """
        クエリパラメータを構築

        座標が登録されている都市は緯度経度で、それ以外は都市名で問い合わせる
        """
        params: Dict[str, Any] = {'appid': self.api_key, 'units': 'metric'}
        city: Optional[CityCoordinates] = find_city(location)
        if city:
            params['lat'] = city.lat
            params['lon'] = city.lon
        else:
            self.logger.debug(f"座標が未登録のため都市名で問い合わせます: {location}")
            params['q'] = location
        return params

    async def _make_request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        HTTPリクエストを実行

        Args:
            params: クエリパラメータ

        Returns:
            APIレスポンスのJSONデータ

        Raises:
            WeatherAPIError: API呼び出しに失敗した場合
        """
        if self.session is None or self.session.closed:
            await self.start_session()

        url = f"{self.base_url}/weather"
        try:
            async with self.session.get(url, params=params) as response:
                if response.status == 200:
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise WeatherAPIError(f"レスポンスのJSONデコードに失敗しました: {e}")

                if response.status == 401:
                    raise WeatherAPIError("APIキーが無効です (HTTP 401)", status_code=response.status)
                if response.status == 404:
                    raise WeatherAPIError("地点が見つかりません (HTTP 404)", status_code=response.status)
                if response.status == 429:
                    raise WeatherAPIError("レート制限に達しました (HTTP 429)", status_code=response.status)
                raise WeatherAPIError(
                    f"Weather API error: {response.status}",
                    status_code=response.status
                )

        except asyncio.TimeoutError:
            raise WeatherAPITimeoutError(f"リクエストがタイムアウトしました: {url}")
        except ClientError as e:
            raise WeatherAPIError(f"ネットワークエラー: {e}")

    def _parse_current_weather(self, location: str, data: Dict[str, Any]) -> WeatherSample:
        """
        APIレスポンスを WeatherSample に変換

        Args:
            location: 地点名
            data: current weather APIのレスポンス

        Returns:
            WeatherSample
        """
        try:
            main = data['main']
            rain = data.get('rain') or {}
            weather = data.get('weather') or [{}]
            if not isinstance(rain, dict) or not isinstance(weather[0], dict):
                raise TypeError("rain と weather[0] はオブジェクトである必要があります")
            return WeatherSample(
                location=location,
                temperature=float(main['temp']),
                humidity=float(main['humidity']),
                rainfall=float(rain.get('1h', 0) or 0),
                wind_speed=float(data['wind']['speed']) * self.MS_TO_KMH,
                description=weather[0].get('description', ''),
                pressure=float(main['pressure']),
            )
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            raise WeatherAPIError(f"気象データの形式が不正です: {location} - {e}")

    async def get_current_weather(self, location: str) -> WeatherSample:
        """
        地点の現在の気象状況を取得

        Args:
            location: 地点名

        Returns:
            WeatherSample

        Raises:
            WeatherAPIError: 取得に失敗した場合
        """
        if not self.is_configured():
            raise WeatherAPIError("OpenWeather API key not configured")

        data = await self._make_request(self._build_params(location))
        sample = self._parse_current_weather(location, data)
        self.logger.debug(
            f"気象データを取得しました: {location} - {sample.temperature}°C, "
            f"{sample.rainfall}mm/hr, {sample.wind_speed:.1f}km/h"
        )
        return sample
