"""
勘定科目エンドポイント
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id
from aoiro.api.schemas import AccountCreate, account_out
from aoiro.config import settings
from aoiro.core.account_registry import ACCOUNT_TYPE_LABELS, account_registry
from aoiro.models.database import get_db

router = APIRouter()


@router.get("")
def list_accounts(
    type: Optional[List[str]] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    勘定科目一覧（区分・科目名順）
    科目が1件もなければデフォルト科目を作成してから返す
    """
    if settings.AUTO_PROVISION_ACCOUNTS:
        account_registry.ensure_default_accounts(db, user_id)

    accounts = account_registry.list_accounts(db, user_id, types=type)
    grouped = account_registry.group_by_type(accounts)
    return {
        "accounts": [account_out(a) for a in accounts],
        "groups": [
            {
                "type": account_type.value,
                "label": ACCOUNT_TYPE_LABELS[account_type],
                "accounts": [account_out(a) for a in members],
            }
            for account_type, members in grouped.items()
            if members
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_account(
    body: AccountCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """勘定科目を追加"""
    account = account_registry.register(db, user_id, body.name, body.type, body.description or "")
    return account_out(account)
