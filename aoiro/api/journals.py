"""
仕訳エンドポイント
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id, get_selected_year
from aoiro.api.schemas import JournalIn, journal_out
from aoiro.core.accounting_engine import accounting_engine
from aoiro.models.database import get_db

router = APIRouter()


@router.get("")
def list_journals(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """選択中の年度の仕訳（新しい順）"""
    journals = accounting_engine.get_user_transactions(db, user_id, year)
    return {"year": year, "journals": [journal_out(j) for j in journals]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_journal(
    body: JournalIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """仕訳を登録"""
    journal = accounting_engine.create_journal_entry(db, user_id, body.model_dump())
    return journal_out(journal)


@router.get("/{journal_id}")
def get_journal(
    journal_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return journal_out(accounting_engine.get_journal(db, user_id, journal_id))


@router.put("/{journal_id}")
def update_journal(
    journal_id: UUID,
    body: JournalIn,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """仕訳を修正（明細は全て置き換え）"""
    journal = accounting_engine.update_journal_entry(db, user_id, journal_id, body.model_dump())
    return journal_out(journal)


@router.delete("/{journal_id}")
def delete_journal(
    journal_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """仕訳を削除"""
    accounting_engine.delete_transaction(db, user_id, journal_id)
    return {"success": True}
