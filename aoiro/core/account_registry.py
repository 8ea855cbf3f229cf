"""
勘定科目レジストリ
勘定科目の登録・一覧と、区分ごとの貸借の向き（正常残高側）を管理
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Optional
import logging
import uuid

from sqlalchemy.orm import Session

from aoiro.core.exceptions import (
    DuplicateAccountError,
    NotFoundOrUnauthorizedError,
    UnknownAccountTypeError,
    ValidationError,
)
from aoiro.models.account import Account, AccountType, DEFAULT_ACCOUNTS

logger = logging.getLogger(__name__)

# 借方で増加する区分
_DEBIT_NORMAL = {
    AccountType.ASSET: True,
    AccountType.EXPENSE: True,
    AccountType.LIABILITY: False,
    AccountType.EQUITY: False,
    AccountType.REVENUE: False,
}

ACCOUNT_TYPE_ORDER = list(AccountType)

ACCOUNT_TYPE_LABELS = {
    AccountType.ASSET: "資産",
    AccountType.LIABILITY: "負債",
    AccountType.EQUITY: "純資産",
    AccountType.REVENUE: "収益",
    AccountType.EXPENSE: "費用",
}


def to_account_type(value) -> AccountType:
    """文字列またはAccountTypeをAccountTypeに変換"""
    try:
        return AccountType(value)
    except ValueError:
        raise UnknownAccountTypeError(value)


def normal_balance_is_debit(account_type) -> bool:
    """
    正常残高が借方か
    資産・費用は借方で増加、負債・純資産・収益は貸方で増加
    """
    return _DEBIT_NORMAL[to_account_type(account_type)]


def sort_accounts(accounts: Iterable[Account]) -> List[Account]:
    """(区分, 科目名) の昇順"""
    return sorted(
        accounts,
        key=lambda a: (ACCOUNT_TYPE_ORDER.index(to_account_type(a.type)), a.name),
    )


class AccountRegistry:
    """勘定科目レジストリ"""

    def register(
        self,
        db: Session,
        user_id: str,
        name: str,
        account_type,
        description: str = "",
    ) -> Account:
        """
        勘定科目を登録
        同名の科目があれば DuplicateAccountError
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("勘定科目名は必須です")
        account_type = to_account_type(account_type)

        if self.find_by_name(db, user_id, name):
            raise DuplicateAccountError(name)

        try:
            account = Account(user_id=user_id, name=name, type=account_type, description=description or "")
            db.add(account)
            db.commit()
            db.refresh(account)
        except Exception as e:
            logger.error(f"Failed to register account {name}: {e}")
            db.rollback()
            raise

        logger.info(f"Account registered: {account.name} ({account.type.value}) for user {user_id}")
        return account

    def list_accounts(self, db: Session, user_id: str, types: Optional[Iterable] = None) -> List[Account]:
        """
        勘定科目一覧を (区分, 科目名) 順で取得
        types を指定するとその区分のみ
        """
        query = db.query(Account).filter(Account.user_id == user_id)
        if types is not None:
            query = query.filter(Account.type.in_([to_account_type(t) for t in types]))
        return sort_accounts(query.all())

    def group_by_type(self, accounts: Iterable[Account]) -> Dict[AccountType, List[Account]]:
        """区分ごとにまとめる（区分の定義順）"""
        grouped: Dict[AccountType, List[Account]] = OrderedDict((t, []) for t in ACCOUNT_TYPE_ORDER)
        for account in sort_accounts(accounts):
            grouped[to_account_type(account.type)].append(account)
        return grouped

    def get_account(self, db: Session, user_id: str, account_id) -> Account:
        try:
            account_uuid = account_id if isinstance(account_id, uuid.UUID) else uuid.UUID(str(account_id))
        except ValueError:
            raise NotFoundOrUnauthorizedError("勘定科目", account_id)
        account = (
            db.query(Account)
            .filter(Account.id == account_uuid, Account.user_id == user_id)
            .first()
        )
        if not account:
            raise NotFoundOrUnauthorizedError("勘定科目", account_id)
        return account

    def find_by_name(self, db: Session, user_id: str, name: str) -> Optional[Account]:
        return db.query(Account).filter(Account.user_id == user_id, Account.name == name).first()

    def get_or_create(
        self, db: Session, user_id: str, name: str, account_type, description: str = ""
    ) -> Account:
        """
        科目がなければ作成（コミットしない）
        呼び出し側のトランザクションに含める
        """
        account = self.find_by_name(db, user_id, name)
        if account:
            return account
        account = Account(user_id=user_id, name=name, type=to_account_type(account_type), description=description)
        db.add(account)
        db.flush()
        logger.info(f"Account provisioned: {name} for user {user_id}")
        return account

    def ensure_default_accounts(self, db: Session, user_id: str) -> int:
        """
        勘定科目が1件もないユーザーにデフォルト科目を作成
        作成件数を返す
        """
        count = db.query(Account).filter(Account.user_id == user_id).count()
        if count > 0:
            return 0

        logger.info(f"User {user_id} has no accounts. Provisioning default accounts...")
        try:
            for data in DEFAULT_ACCOUNTS:
                db.add(Account(user_id=user_id, **data))
            db.commit()
        except Exception as e:
            logger.error(f"Failed to provision default accounts: {e}")
            db.rollback()
            raise
        return len(DEFAULT_ACCOUNTS)


account_registry = AccountRegistry()
