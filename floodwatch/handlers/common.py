"""HTTPハンドラー共通のレスポンス生成とミドルウェア"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict

from aiohttp import web

from ..database import DatabaseError
from ..models.errors import ValidationError
from ..services.monitor_service import MonitorConfigurationError

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


def json_success(data: Dict[str, Any], status: int = 200) -> web.Response:
    """成功レスポンスを作成"""
    return web.json_response({'success': True, **data}, status=status)


def json_error(message: str, status: int) -> web.Response:
    """エラーレスポンスを作成"""
    return web.json_response({'success': False, 'error': message}, status=status)


async def read_json(request: web.Request) -> Dict[str, Any]:
    """
    リクエストボディをJSONオブジェクトとして読み込む

    Raises:
        ValidationError: ボディがJSONオブジェクトでない場合
    """
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")

    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """全レスポンスにCORSヘッダーを付与し、プリフライトに応答する"""
    if request.method == 'OPTIONS':
        return web.Response(status=200, headers=CORS_HEADERS)

    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(CORS_HEADERS)
        raise

    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """例外を {success: false, error} 形式のレスポンスに変換する"""
    try:
        return await handler(request)

    except web.HTTPException as e:
        if e.status < 400:
            raise
        response = json_error(e.reason, e.status)
        if 'Allow' in e.headers:
            response.headers['Allow'] = e.headers['Allow']
        return response

    except ValidationError as e:
        logger.info(f"リクエスト検証エラー: {request.method} {request.path} - {e}")
        return json_error(str(e), 400)

    except MonitorConfigurationError as e:
        logger.error(f"監視設定エラー: {e}")
        return json_error(str(e), 500)

    except DatabaseError as e:
        logger.error(f"データベースエラー: {request.method} {request.path} - {e}")
        return json_error(str(e), 500)

    except Exception as e:
        logger.error(f"予期しないエラー: {request.method} {request.path} - {e}", exc_info=True)
        return json_error(str(e) or "Internal server error", 500)
