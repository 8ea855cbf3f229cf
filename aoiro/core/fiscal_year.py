"""
会計年度コンテキスト
選択中の年度の解決と、年度の日付範囲（半開区間）を扱う
"""

from datetime import date
from typing import Any, Optional, Tuple

from aoiro.core.exceptions import InvalidYearError

# 翌年1月1日が date で表せる最後の年
MAX_YEAR = 9998


def validate_year(year: Any) -> int:
    """年度が 1..MAX_YEAR の整数であることを確認して返す"""
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= MAX_YEAR:
        raise InvalidYearError(year)
    return year


def resolve_fiscal_year(value: Optional[str], today: Optional[date] = None) -> int:
    """
    Cookie等の文字列から年度を解決する
    未設定なら今年を返す
    """
    if value is None or value == "":
        return (today or date.today()).year
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise InvalidYearError(value)
    return validate_year(year)


def year_range(year: int) -> Tuple[date, date]:
    """[year-01-01, (year+1)-01-01) の半開区間"""
    validate_year(year)
    return date(year, 1, 1), date(year + 1, 1, 1)


def year_start(year: int) -> date:
    return year_range(year)[0]


def year_end(year: int) -> date:
    """年度の最終日（12月31日）"""
    validate_year(year)
    return date(year, 12, 31)
