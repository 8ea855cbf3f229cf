"""
年次繰越エンドポイント
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id
from aoiro.api.schemas import ClosingRequest
from aoiro.core.year_end_closing import year_end_closing
from aoiro.models.database import get_db

router = APIRouter()


@router.post("")
def close_year(
    body: ClosingRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """対象年度を締めて翌年度の期首残高を作成"""
    next_year = year_end_closing.close_year(db, user_id, body.year)
    return {
        "success": True,
        "message": f"{body.year}年度の残高を{next_year}年度の期首残高として繰り越しました",
        "next_year": next_year,
    }
