"""
決算書エンドポイント
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id, get_selected_year
from aoiro.core.balance_engine import balance_engine
from aoiro.core.financial_statements import financial_statement_generator
from aoiro.core.ledger_generator import ledger_generator, to_records
from aoiro.models.database import get_db

router = APIRouter()


@router.get("/income-statement")
def income_statement(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """青色申告決算書（損益計算書）"""
    return financial_statement_generator.generate_income_statement(db, user_id, year).to_dict()


@router.get("/balance-sheet")
def balance_sheet(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """貸借対照表"""
    return financial_statement_generator.generate_balance_sheet(db, user_id, year).to_dict()


@router.get("/trial-balance")
def trial_balance(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """残高試算表"""
    df = ledger_generator.generate_trial_balance(db, user_id, year)
    return {"year": year, "rows": to_records(df)}


@router.get("/summary")
def summary(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """区分別合計と当期純利益"""
    return balance_engine.summary(db, user_id, year)
