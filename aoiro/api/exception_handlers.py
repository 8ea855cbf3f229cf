"""
例外ハンドラ
会計エンジンの例外をHTTPレスポンスに変換する

レスポンス形式:
    {
        "detail": "利用者向けメッセージ",
        "code": "ERROR_CODE",
        "errors": ["メッセージ", ...]
    }
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from aoiro.core.exceptions import (
    AoiroError,
    ConflictError,
    ErrorCode,
    NotFoundOrUnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_CODE_TO_STATUS = {
    # 400 入力エラー
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNBALANCED_JOURNAL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_YEAR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ACCOUNT_TYPE: status.HTTP_400_BAD_REQUEST,
    # 404 存在しない・権限なし
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # 409 競合
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ACCOUNT: status.HTTP_409_CONFLICT,
    ErrorCode.DEPRECIATION_ALREADY_POSTED: status.HTTP_409_CONFLICT,
}


def status_for(exc: AoiroError) -> int:
    """エラーコード、なければ例外の種類からステータスを決める"""
    if exc.code in ERROR_CODE_TO_STATUS:
        return ERROR_CODE_TO_STATUS[exc.code]
    if isinstance(exc, NotFoundOrUnauthorizedError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def error_response(exc: AoiroError) -> JSONResponse:
    errors = exc.errors if isinstance(exc, ValidationError) else [exc.message]
    return JSONResponse(
        status_code=status_for(exc),
        content={
            "detail": exc.message,
            "code": exc.code.value,
            "errors": errors,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """アプリケーションに例外ハンドラを登録"""

    @app.exception_handler(AoiroError)
    async def aoiro_exception_handler(request: Request, exc: AoiroError) -> JSONResponse:
        logger.warning(
            "Domain error on %s %s: %s (code=%s, details=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code.value,
            exc.details,
        )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """リクエストの形式エラーも同じ形式の400で返す"""
        errors = [
            f"{'.'.join(str(loc) for loc in error['loc'] if loc != 'body')}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.warning("Request validation failed on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "入力内容に誤りがあります",
                "code": ErrorCode.VALIDATION_ERROR.value,
                "errors": errors,
            },
        )
