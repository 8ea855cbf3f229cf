"""
帳簿生成エンジン
仕訳帳・総勘定元帳・残高試算表・月別集計・支払先別集計を DataFrame で生成
"""

from typing import Any, Dict, Iterable, List, Optional
import json
import logging

import pandas as pd
from sqlalchemy.orm import Session

from aoiro.core.account_registry import ACCOUNT_TYPE_LABELS, normal_balance_is_debit, sort_accounts, to_account_type
from aoiro.core.balance_engine import LedgerRow, balance_engine, compute_balances, normalize, signed_amount
from aoiro.models.account import AccountType

logger = logging.getLogger(__name__)

JOURNAL_COLUMNS = ["日付", "仕訳ID", "摘要", "借方科目", "借方金額", "貸方科目", "貸方金額"]
LEDGER_COLUMNS = ["日付", "摘要", "相手科目", "借方", "貸方", "残高"]
TRIAL_BALANCE_COLUMNS = ["勘定科目", "区分", "借方残高", "貸方残高"]
MONTHLY_COLUMNS = ["月", "収益", "費用", "損益"]
PAYEE_COLUMNS = ["勘定科目", "支払先", "金額"]

# 決算書で内訳の記入が必要な経費科目（表示順）
PAYEE_ACCOUNT_NAMES = ["給料賃金", "地代家賃", "外注工賃", "修繕費", "専従者給与"]
UNKNOWN_PAYEE = "不明 (摘要なし)"

# 相手科目が複数ある場合の表示
MULTIPLE_COUNTERPARTS = "諸口"
TOTAL_LABEL = "【合計】"


def payee_name(description: Optional[str]) -> str:
    """摘要を支払先として扱う"""
    name = (description or "").strip()
    return name or UNKNOWN_PAYEE


def to_records(df: pd.DataFrame) -> List[Dict]:
    """JSONに渡せる形（numpyの数値型を含まない）に変換"""
    return json.loads(df.to_json(orient="records", force_ascii=False))


def journal_book(journals: Iterable[Any], account_names: Dict[Any, str]) -> pd.DataFrame:
    """
    仕訳帳（明細1行ごと）
    """
    data = []
    for journal in sorted(journals, key=lambda j: j.date):
        for entry in journal.entries:
            name = account_names.get(entry.account_id, "")
            data.append(
                {
                    "日付": journal.date.strftime("%Y-%m-%d"),
                    "仕訳ID": str(journal.id),
                    "摘要": journal.description,
                    "借方科目": name if entry.is_debit else "",
                    "借方金額": entry.amount if entry.is_debit else 0,
                    "貸方科目": "" if entry.is_debit else name,
                    "貸方金額": 0 if entry.is_debit else entry.amount,
                }
            )
    return pd.DataFrame(data, columns=JOURNAL_COLUMNS)


def general_ledger(rows: Iterable[LedgerRow]) -> pd.DataFrame:
    """総勘定元帳の行を DataFrame に"""
    data = []
    for row in rows:
        if len(row.counterparts) > 1:
            counterpart = MULTIPLE_COUNTERPARTS
        else:
            counterpart = "".join(row.counterparts)
        data.append(
            {
                "日付": row.date.strftime("%Y-%m-%d"),
                "摘要": row.description,
                "相手科目": counterpart,
                "借方": row.debit,
                "貸方": row.credit,
                "残高": row.balance,
            }
        )
    return pd.DataFrame(data, columns=LEDGER_COLUMNS)


def trial_balance(accounts: Iterable[Any], balances: Dict[Any, int]) -> pd.DataFrame:
    """
    残高試算表
    各科目の残高を借方・貸方に振り分け、最終行に合計を付ける
    """
    data = []
    for account in sort_accounts(accounts):
        amount, is_debit = normalize(balances.get(account.id, 0), normal_balance_is_debit(account.type))
        data.append(
            {
                "勘定科目": account.name,
                "区分": ACCOUNT_TYPE_LABELS[to_account_type(account.type)],
                "借方残高": amount if is_debit else 0,
                "貸方残高": 0 if is_debit else amount,
            }
        )
    df = pd.DataFrame(data, columns=TRIAL_BALANCE_COLUMNS)

    # 合計行追加
    total = pd.DataFrame(
        [
            {
                "勘定科目": TOTAL_LABEL,
                "区分": "",
                "借方残高": int(df["借方残高"].sum()),
                "貸方残高": int(df["貸方残高"].sum()),
            }
        ],
        columns=TRIAL_BALANCE_COLUMNS,
    )
    return pd.concat([df, total], ignore_index=True)


def monthly_summary(accounts: Iterable[Any], journals: Iterable[Any]) -> pd.DataFrame:
    """
    月別の収益・費用・損益（1月〜12月）
    青色申告決算書の「月別売上（収入）金額及び仕入金額」欄の記入用
    """
    types = {a.id: to_account_type(a.type) for a in accounts}
    revenue = [0] * 12
    expense = [0] * 12

    for journal in journals:
        month = journal.date.month - 1
        for entry in journal.entries:
            account_type = types.get(entry.account_id)
            if account_type == AccountType.REVENUE:
                revenue[month] += signed_amount(account_type, entry.amount, entry.is_debit)
            elif account_type == AccountType.EXPENSE:
                expense[month] += signed_amount(account_type, entry.amount, entry.is_debit)

    df = pd.DataFrame({"月": list(range(1, 13)), "収益": revenue, "費用": expense})
    df["損益"] = df["収益"] - df["費用"]
    return df[MONTHLY_COLUMNS]


def payee_summary(accounts: Iterable[Any], journals: Iterable[Any]) -> pd.DataFrame:
    """
    支払先（摘要）別の経費集計
    科目は PAYEE_ACCOUNT_NAMES の順、科目内は金額の大きい順
    """
    targets = {a.id: a.name for a in accounts if a.name in PAYEE_ACCOUNT_NAMES}
    records = []
    for journal in journals:
        payee = payee_name(journal.description)
        for entry in journal.entries:
            name = targets.get(entry.account_id)
            if name is None:
                continue
            records.append(
                {
                    "勘定科目": name,
                    "支払先": payee,
                    "金額": signed_amount(AccountType.EXPENSE, entry.amount, entry.is_debit),
                }
            )

    if not records:
        return pd.DataFrame(columns=PAYEE_COLUMNS)

    df = pd.DataFrame(records).groupby(["勘定科目", "支払先"], as_index=False)["金額"].sum()
    df["_order"] = df["勘定科目"].map(PAYEE_ACCOUNT_NAMES.index)
    df = df.sort_values(["_order", "金額"], ascending=[True, False], kind="stable")
    return df.drop(columns="_order").reset_index(drop=True)


class LedgerGenerator:
    """帳簿生成エンジン"""

    def generate_journal(self, db: Session, user_id: str, year: int) -> pd.DataFrame:
        """
        仕訳帳生成
        """
        data = balance_engine.load_year(db, user_id, year)
        names = {a.id: a.name for a in data.accounts}
        return journal_book(data.journals, names)

    def generate_general_ledger(self, db: Session, user_id: str, account_id, year: int) -> pd.DataFrame:
        """
        総勘定元帳生成（特定勘定科目の詳細）
        """
        _, rows = balance_engine.account_ledger(db, user_id, account_id, year)
        return general_ledger(rows)

    def generate_trial_balance(self, db: Session, user_id: str, year: int) -> pd.DataFrame:
        """
        残高試算表生成（期首残高を含む年度末時点）
        """
        data = balance_engine.load_year(db, user_id, year)
        balances = compute_balances(data.accounts, data.opening_balances, data.journals)
        df = trial_balance(data.accounts, balances)
        totals = df.iloc[-1]
        if totals["借方残高"] != totals["貸方残高"]:
            logger.warning(
                f"Trial balance mismatch (year={year}): debit={totals['借方残高']}, credit={totals['貸方残高']}"
            )
        return df

    def generate_monthly_summary(self, db: Session, user_id: str, year: int) -> pd.DataFrame:
        """
        月別集計生成
        """
        data = balance_engine.load_year(db, user_id, year)
        return monthly_summary(data.accounts, data.journals)

    def generate_payee_summary(self, db: Session, user_id: str, year: int) -> pd.DataFrame:
        """
        支払先別集計生成
        """
        data = balance_engine.load_year(db, user_id, year)
        return payee_summary(data.accounts, data.journals)


ledger_generator = LedgerGenerator()
