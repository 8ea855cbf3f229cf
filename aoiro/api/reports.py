"""
集計レポートエンドポイント
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id, get_selected_year
from aoiro.core.ledger_generator import ledger_generator, to_records
from aoiro.models.database import get_db

router = APIRouter()


@router.get("/monthly")
def monthly_report(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """月別の収益・費用"""
    df = ledger_generator.generate_monthly_summary(db, user_id, year)
    return {
        "year": year,
        "months": to_records(df),
        "total_revenue": int(df["収益"].sum()),
        "total_expense": int(df["費用"].sum()),
    }


@router.get("/payee")
def payee_report(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """支払先別の経費内訳"""
    df = ledger_generator.generate_payee_summary(db, user_id, year)
    return {"year": year, "rows": to_records(df)}
