"""
会計エンジンの例外定義
API層でHTTPレスポンスに変換するため、全ての例外は AoiroError を継承する
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """クライアント向けの安定したエラーコード"""

    # 入力エラー (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNBALANCED_JOURNAL = "UNBALANCED_JOURNAL"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_YEAR = "INVALID_YEAR"
    INVALID_ACCOUNT_TYPE = "INVALID_ACCOUNT_TYPE"

    # 存在しない・権限なし (404)
    NOT_FOUND = "NOT_FOUND"

    # 競合 (409)
    CONFLICT = "CONFLICT"
    DUPLICATE_ACCOUNT = "DUPLICATE_ACCOUNT"
    DEPRECIATION_ALREADY_POSTED = "DEPRECIATION_ALREADY_POSTED"


class AoiroError(Exception):
    """会計エンジンの基底例外"""

    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}


class ValidationError(AoiroError):
    """書き込み前に検出した入力エラー。メッセージはそのまま利用者に返す"""

    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.errors = errors or [message]


class InvalidYearError(ValidationError):
    """年度が正の整数でない"""

    def __init__(self, year: Any):
        super().__init__(
            f"年度が不正です: {year!r}",
            code=ErrorCode.INVALID_YEAR,
            details={"year": str(year)},
        )


class UnknownAccountTypeError(ValidationError):
    """勘定科目区分が定義外"""

    def __init__(self, account_type: Any):
        super().__init__(
            f"不明な勘定科目区分です: {account_type!r}",
            code=ErrorCode.INVALID_ACCOUNT_TYPE,
            details={"type": str(account_type)},
        )


class NotFoundOrUnauthorizedError(AoiroError):
    """レコードが存在しないか、他ユーザーの所有。存在の有無は区別しない"""

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, resource_id: Any = None):
        super().__init__(
            f"{resource}が見つからないか、アクセス権限がありません",
            details={"resource": resource, "id": str(resource_id) if resource_id else None},
        )


class ConflictError(AoiroError):
    """既存データとの競合"""

    default_code = ErrorCode.CONFLICT


class DuplicateAccountError(ConflictError):
    """同名の勘定科目が既に存在する"""

    def __init__(self, name: str):
        super().__init__(
            f"勘定科目「{name}」は既に登録されています。別の名前を指定するか、既存の科目を使用してください。",
            code=ErrorCode.DUPLICATE_ACCOUNT,
            details={"name": name},
        )


class DepreciationAlreadyPostedError(ConflictError):
    """同一年度の減価償却仕訳が既に存在する"""

    def __init__(self, year: int):
        super().__init__(
            f"{year}年度の減価償却は既に計上済みです。再実行する場合は、先に既存の減価償却仕訳を削除してください。",
            code=ErrorCode.DEPRECIATION_ALREADY_POSTED,
            details={"year": year},
        )
