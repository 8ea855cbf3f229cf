"""
期首残高エンドポイント
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id, get_selected_year
from aoiro.api.schemas import OpeningBalanceIn, opening_balance_out
from aoiro.core.accounting_engine import accounting_engine
from aoiro.models.database import get_db

router = APIRouter()


@router.get("")
def list_opening_balances(
    year: Optional[int] = None,
    user_id: str = Depends(get_current_user_id),
    selected_year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    target_year = year if year is not None else selected_year
    balances = accounting_engine.list_opening_balances(db, user_id, target_year)
    return {"year": target_year, "opening_balances": [opening_balance_out(b) for b in balances]}


@router.put("")
def set_opening_balance(
    body: OpeningBalanceIn,
    user_id: str = Depends(get_current_user_id),
    selected_year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """期首残高を登録（既存があれば置き換え）"""
    target_year = body.year if body.year is not None else selected_year
    balance = accounting_engine.set_opening_balance(
        db, user_id, target_year, body.account_id, body.amount, body.is_debit
    )
    return opening_balance_out(balance)
