"""
残高計算エンジン
期首残高と仕訳から勘定科目ごとの残高を計算する

残高は各科目の正常残高側を正とする符号付き整数
（資産・費用は借方がプラス、負債・純資産・収益は貸方がプラス）
"""

from dataclasses import dataclass, field
from datetime import date
from itertools import accumulate
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple
import logging
import uuid

from sqlalchemy.orm import Session, selectinload

from aoiro.core.account_registry import account_registry, normal_balance_is_debit, to_account_type
from aoiro.core.fiscal_year import year_range, year_start
from aoiro.models.account import Account, AccountType, BALANCE_SHEET_TYPES
from aoiro.models.journal import Journal
from aoiro.models.opening_balance import OpeningBalance

logger = logging.getLogger(__name__)

OPENING_DESCRIPTION = "前期繰越"


def signed_amount(account_type, amount: int, is_debit: bool) -> int:
    """正常残高側なら増加（+）、反対側なら減少（-）"""
    increase = normal_balance_is_debit(account_type) == is_debit
    return amount if increase else -amount


def normalize(amount: int, normal_is_debit: bool) -> Tuple[int, bool]:
    """
    符号付き残高を (金額, 借方か) に変換
    マイナスなら反対側に残高がある
    """
    if amount < 0:
        return -amount, not normal_is_debit
    return amount, normal_is_debit


def order_journals(journals: Iterable[Any]) -> List[Any]:
    """日付順（同日は入力順を保持）"""
    return sorted(journals, key=lambda j: j.date)


def compute_balances(
    accounts: Iterable[Any],
    opening_balances: Iterable[Any],
    journals: Iterable[Any],
) -> Dict[Any, int]:
    """
    勘定科目ID -> 符号付き残高
    期首残高は貸借対照表科目のみ反映し、収益・費用は0から始める
    """
    accounts = list(accounts)
    types = {a.id: to_account_type(a.type) for a in accounts}
    # 区分不明の科目はここで UnknownAccountTypeError
    for account_type in types.values():
        normal_balance_is_debit(account_type)

    balances = {a.id: 0 for a in accounts}

    for ob in opening_balances:
        account_type = types.get(ob.account_id)
        if account_type is None:
            continue
        if account_type not in BALANCE_SHEET_TYPES:
            logger.debug(f"Opening balance ignored for P/L account {ob.account_id}")
            continue
        balances[ob.account_id] += signed_amount(account_type, ob.amount, ob.is_debit)

    for journal in order_journals(journals):
        for entry in journal.entries:
            account_type = types.get(entry.account_id)
            if account_type is None:
                # 科目セットにない明細（整合していれば起きない）
                continue
            balances[entry.account_id] += signed_amount(account_type, entry.amount, entry.is_debit)

    return balances


def summarize_by_type(accounts: Iterable[Any], balances: Dict[Any, int]) -> Dict[AccountType, int]:
    """区分ごとの残高合計"""
    summary = {t: 0 for t in AccountType}
    for account in accounts:
        summary[to_account_type(account.type)] += balances.get(account.id, 0)
    return summary


def net_income(accounts: Iterable[Any], balances: Dict[Any, int]) -> int:
    """当期純利益 = 収益合計 - 費用合計（損失ならマイナス）"""
    summary = summarize_by_type(accounts, balances)
    return summary[AccountType.REVENUE] - summary[AccountType.EXPENSE]


@dataclass
class LedgerRow:
    """総勘定元帳の1行"""

    date: date
    description: str
    debit: int
    credit: int
    balance: int
    journal_id: Optional[uuid.UUID] = None
    counterparts: List[str] = field(default_factory=list)
    is_opening: bool = False


def _movements(account_id, journals: Iterable[Any]) -> Iterator[Tuple[Any, Any]]:
    for journal in order_journals(journals):
        for entry in journal.entries:
            if entry.account_id == account_id:
                yield journal, entry


def _counterparts(journal, entry) -> List[str]:
    names = []
    for other in journal.entries:
        counter_account = getattr(other, "account", None)
        if other.is_debit != entry.is_debit and counter_account is not None:
            if counter_account.name not in names:
                names.append(counter_account.name)
    return names


def ledger_rows(
    account: Any,
    year: int,
    opening_balance: Optional[Any],
    journals: Iterable[Any],
) -> List[LedgerRow]:
    """
    1科目の元帳（明細ごとの累計残高付き）
    期首残高があれば年度初日の「前期繰越」行を先頭に置く
    """
    account_type = to_account_type(account.type)
    start = 0
    rows: List[LedgerRow] = []

    if opening_balance is not None:
        start = signed_amount(account_type, opening_balance.amount, opening_balance.is_debit)
        rows.append(
            LedgerRow(
                date=year_start(year),
                description=OPENING_DESCRIPTION,
                debit=opening_balance.amount if opening_balance.is_debit else 0,
                credit=0 if opening_balance.is_debit else opening_balance.amount,
                balance=start,
                is_opening=True,
            )
        )

    movements = list(_movements(account.id, journals))
    deltas = [signed_amount(account_type, e.amount, e.is_debit) for _, e in movements]
    # 先頭は期首残高そのものなので除く
    running = list(accumulate(deltas, initial=start))[1:]

    for (journal, entry), balance in zip(movements, running):
        rows.append(
            LedgerRow(
                date=journal.date,
                description=journal.description,
                debit=entry.amount if entry.is_debit else 0,
                credit=0 if entry.is_debit else entry.amount,
                balance=balance,
                journal_id=journal.id,
                counterparts=_counterparts(journal, entry),
            )
        )
    return rows


@dataclass
class YearData:
    """1年度分の計算材料"""

    year: int
    accounts: List[Account]
    opening_balances: List[OpeningBalance]
    journals: List[Journal]


class BalanceEngine:
    """残高計算エンジン（DBからの読み込み）"""

    def load_journals(self, db: Session, user_id: str, year: int) -> List[Journal]:
        start, end = year_range(year)
        return (
            db.query(Journal)
            .options(selectinload(Journal.entries))
            .filter(
                Journal.user_id == user_id,
                Journal.date >= start,
                Journal.date < end,
            )
            .order_by(Journal.date, Journal.created_at, Journal.id)
            .all()
        )

    def load_opening_balances(self, db: Session, user_id: str, year: int) -> List[OpeningBalance]:
        return (
            db.query(OpeningBalance)
            .filter(OpeningBalance.user_id == user_id, OpeningBalance.year == year)
            .all()
        )

    def load_year(self, db: Session, user_id: str, year: int) -> YearData:
        """勘定科目・期首残高・年度内の仕訳をまとめて取得"""
        return YearData(
            year=year,
            accounts=account_registry.list_accounts(db, user_id),
            opening_balances=self.load_opening_balances(db, user_id, year),
            journals=self.load_journals(db, user_id, year),
        )

    def compute_year_balances(self, db: Session, user_id: str, year: int) -> Tuple[List[Account], Dict[Any, int]]:
        data = self.load_year(db, user_id, year)
        balances = compute_balances(data.accounts, data.opening_balances, data.journals)
        return data.accounts, balances

    def account_ledger(self, db: Session, user_id: str, account_id, year: int) -> Tuple[Account, List[LedgerRow]]:
        """総勘定元帳（1科目）"""
        account = account_registry.get_account(db, user_id, account_id)
        opening = (
            db.query(OpeningBalance)
            .filter(
                OpeningBalance.user_id == user_id,
                OpeningBalance.year == year,
                OpeningBalance.account_id == account.id,
            )
            .first()
        )
        start, end = year_range(year)
        journals = (
            db.query(Journal)
            .options(selectinload(Journal.entries))
            .filter(
                Journal.user_id == user_id,
                Journal.date >= start,
                Journal.date < end,
                Journal.entries.any(account_id=account.id),
            )
            .order_by(Journal.date, Journal.created_at, Journal.id)
            .all()
        )
        return account, ledger_rows(account, year, opening, journals)

    def summary(self, db: Session, user_id: str, year: int) -> Dict:
        """区分別合計と当期純利益（ダッシュボード用）"""
        accounts, balances = self.compute_year_balances(db, user_id, year)
        by_type = summarize_by_type(accounts, balances)
        return {
            "year": year,
            "summary": {t.value: amount for t, amount in by_type.items()},
            "net_income": by_type[AccountType.REVENUE] - by_type[AccountType.EXPENSE],
        }


balance_engine = BalanceEngine()
