"""
APIの共通依存関係
ログインユーザーと選択中の会計年度を解決する
"""

from fastapi import HTTPException, Request, status

from aoiro.config import settings
from aoiro.core.fiscal_year import resolve_fiscal_year


def get_current_user_id(request: Request) -> str:
    """
    認証済みユーザーID
    認証はリバースプロキシ等で行い、解決済みのIDをヘッダーで受け取る
    """
    user_id = (request.headers.get(settings.USER_ID_HEADER) or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="ログインが必要です",
        )
    return user_id


def get_selected_year(request: Request) -> int:
    """Cookieで選択中の年度（未設定なら今年）"""
    return resolve_fiscal_year(request.cookies.get(settings.YEAR_COOKIE))
