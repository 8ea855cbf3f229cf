"""
ヘルスチェックエンドポイント
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aoiro.models.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


def check_db_connection(db: Session) -> bool:
    """データベース接続確認"""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


@router.get("")
def health_check(db: Session = Depends(get_db)):
    """ヘルスチェック"""
    db_status = check_db_connection(db)
    return {
        "status": "healthy" if db_status else "unhealthy",
        "services": {
            "database": "connected" if db_status else "disconnected",
        },
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """レディネスチェック"""
    if check_db_connection(db):
        return {"status": "ready"}
    return {"status": "not ready", "reason": "Database not available"}


@router.get("/live")
def liveness_check():
    """ライブネスチェック"""
    return {"status": "alive"}
