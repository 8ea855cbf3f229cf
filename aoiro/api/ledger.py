"""
帳簿エンドポイント（仕訳帳・総勘定元帳）
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id, get_selected_year
from aoiro.api.schemas import account_out
from aoiro.core.account_registry import account_registry
from aoiro.core.ledger_generator import ledger_generator, to_records
from aoiro.models.database import get_db

router = APIRouter()


@router.get("/journal")
def journal_book(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """仕訳帳"""
    df = ledger_generator.generate_journal(db, user_id, year)
    return {"year": year, "rows": to_records(df)}


@router.get("/{account_id}")
def general_ledger(
    account_id: UUID,
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """総勘定元帳（1科目）"""
    account = account_registry.get_account(db, user_id, account_id)
    df = ledger_generator.generate_general_ledger(db, user_id, account.id, year)
    return {"year": year, "account": account_out(account), "rows": to_records(df)}
