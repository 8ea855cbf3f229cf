"""
年次繰越（決算締め）
対象年度の期末残高を計算し、貸借対照表科目を翌年度の期首残高として書き込む
当期純利益は元入金に振り替え、収益・費用は翌年度0から始まる
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from aoiro.core.account_registry import normal_balance_is_debit, to_account_type
from aoiro.core.balance_engine import balance_engine, compute_balances, net_income, normalize, signed_amount
from aoiro.core.fiscal_year import validate_year
from aoiro.models.account import AccountType, BALANCE_SHEET_TYPES
from aoiro.models.opening_balance import OpeningBalance

logger = logging.getLogger(__name__)

# 当期純利益の振替先（名前にこれを含む純資産科目）
CAPITAL_ACCOUNT_MARKER = "元入金"


@dataclass
class ClosingBalance:
    account_id: Any
    name: str
    amount: int
    is_debit: bool


def find_capital_account(accounts: Iterable[Any]) -> Optional[Any]:
    for account in accounts:
        if to_account_type(account.type) == AccountType.EQUITY and CAPITAL_ACCOUNT_MARKER in account.name:
            return account
    return None


def compute_closing_balances(
    accounts: Iterable[Any],
    opening_balances: Iterable[Any],
    journals: Iterable[Any],
) -> Tuple[Dict[Any, ClosingBalance], int]:
    """
    翌年度の期首残高と当期純利益を計算（DB書き込みなし）
    戻り値は (勘定科目ID -> ClosingBalance, 当期純利益)
    """
    accounts = list(accounts)
    balances = compute_balances(accounts, opening_balances, journals)
    income = net_income(accounts, balances)

    capital = find_capital_account(accounts)
    if capital is not None:
        # 利益は貸方（増加）、損失は借方（減少）として元入金に加える
        balances[capital.id] += signed_amount(AccountType.EQUITY, abs(income), is_debit=income < 0)
    elif income != 0:
        logger.warning(f"No capital account ({CAPITAL_ACCOUNT_MARKER}) found; net income {income} not carried forward")

    closing = {}
    for account in accounts:
        if to_account_type(account.type) not in BALANCE_SHEET_TYPES:
            continue
        amount, is_debit = normalize(balances[account.id], normal_balance_is_debit(account.type))
        closing[account.id] = ClosingBalance(account.id, account.name, amount, is_debit)
    return closing, income


class YearEndClosing:
    """年次繰越処理"""

    def close_year(self, db: Session, user_id: str, target_year: int) -> int:
        """
        対象年度を締めて翌年度の期首残高を書き込む
        翌年度の既存の期首残高は削除してから作り直す（何度実行しても同じ結果）
        """
        validate_year(target_year)
        next_year = target_year + 1

        data = balance_engine.load_year(db, user_id, target_year)
        closing, income = compute_closing_balances(data.accounts, data.opening_balances, data.journals)

        try:
            db.query(OpeningBalance).filter(
                OpeningBalance.user_id == user_id,
                OpeningBalance.year == next_year,
            ).delete(synchronize_session="fetch")

            for balance in closing.values():
                db.add(
                    OpeningBalance(
                        user_id=user_id,
                        year=next_year,
                        account_id=balance.account_id,
                        amount=balance.amount,
                        is_debit=balance.is_debit,
                    )
                )
            db.commit()
        except Exception as e:
            logger.error(f"Annual closing failed for {target_year}: {e}")
            db.rollback()
            raise

        logger.info(
            f"Year {target_year} closed for user {user_id}: "
            f"{len(closing)} opening balances written for {next_year}, net income {income}"
        )
        return next_year


year_end_closing = YearEndClosing()
