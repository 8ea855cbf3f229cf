"""
残高計算エンジンのテスト
"""

import uuid
from datetime import date
from types import SimpleNamespace

import pytest

from aoiro.core.balance_engine import (
    OPENING_DESCRIPTION,
    balance_engine,
    compute_balances,
    ledger_rows,
    net_income,
    normalize,
    signed_amount,
)
from aoiro.core.exceptions import UnknownAccountTypeError
from aoiro.models.account import AccountType


def account(name, account_type):
    return SimpleNamespace(id=uuid.uuid4(), name=name, type=account_type)


def opening(acc, amount, is_debit):
    return SimpleNamespace(account_id=acc.id, amount=amount, is_debit=is_debit)


def journal(journal_date, description, *lines):
    """lines は (科目, 金額, 借方か)"""
    return SimpleNamespace(
        id=uuid.uuid4(),
        date=journal_date,
        description=description,
        entries=[
            SimpleNamespace(account_id=acc.id, account=acc, amount=amount, is_debit=is_debit)
            for acc, amount, is_debit in lines
        ],
    )


class TestSignConvention:
    """貸借の向き"""

    def test_debit_normal_types(self):
        assert signed_amount(AccountType.ASSET, 100, True) == 100
        assert signed_amount(AccountType.ASSET, 100, False) == -100
        assert signed_amount(AccountType.EXPENSE, 100, True) == 100

    def test_credit_normal_types(self):
        for t in (AccountType.LIABILITY, AccountType.EQUITY, AccountType.REVENUE):
            assert signed_amount(t, 100, False) == 100
            assert signed_amount(t, 100, True) == -100

    def test_unknown_type(self):
        with pytest.raises(UnknownAccountTypeError):
            signed_amount("CONTRA", 100, True)

    def test_normalize(self):
        assert normalize(500, True) == (500, True)
        assert normalize(-500, True) == (500, False)
        assert normalize(-500, False) == (500, True)
        assert normalize(0, False) == (0, False)


class TestComputeBalances:
    """残高計算"""

    def setup_method(self):
        self.cash = account("現金", AccountType.ASSET)
        self.sales = account("売上高", AccountType.REVENUE)
        self.rent = account("地代家賃", AccountType.EXPENSE)
        self.capital = account("元入金", AccountType.EQUITY)
        self.accounts = [self.cash, self.sales, self.rent, self.capital]

    def test_opening_plus_journal(self):
        """期首 100,000（借方）に 30,000 の入金で 130,000"""
        balances = compute_balances(
            self.accounts,
            [opening(self.cash, 100000, True), opening(self.capital, 100000, False)],
            [journal(date(2024, 5, 1), "売上", (self.cash, 30000, True), (self.sales, 30000, False))],
        )
        assert balances[self.cash.id] == 130000
        assert balances[self.sales.id] == 30000
        assert balances[self.capital.id] == 100000
        assert balances[self.rent.id] == 0

    def test_profit_and_loss_opening_is_ignored(self):
        balances = compute_balances(self.accounts, [opening(self.sales, 99999, False)], [])
        assert balances[self.sales.id] == 0

    def test_entries_for_unknown_accounts_are_skipped(self):
        stranger = account("他人の科目", AccountType.ASSET)
        balances = compute_balances(
            self.accounts,
            [],
            [journal(date(2024, 1, 1), "x", (stranger, 500, True), (self.sales, 500, False))],
        )
        assert stranger.id not in balances
        assert balances[self.sales.id] == 500

    def test_negative_balance_is_kept_signed(self):
        balances = compute_balances(
            self.accounts,
            [],
            [journal(date(2024, 1, 1), "引出", (self.rent, 1000, True), (self.cash, 1000, False))],
        )
        assert balances[self.cash.id] == -1000

    def test_net_income(self):
        balances = compute_balances(
            self.accounts,
            [],
            [
                journal(date(2024, 1, 1), "売上", (self.cash, 80000, True), (self.sales, 80000, False)),
                journal(date(2024, 1, 2), "家賃", (self.rent, 30000, True), (self.cash, 30000, False)),
            ],
        )
        assert net_income(self.accounts, balances) == 50000

    def test_order_independence(self):
        """同じ仕訳なら並び順が違っても残高は同じ"""
        journals = [
            journal(date(2024, 3, 1), "a", (self.cash, 100, True), (self.sales, 100, False)),
            journal(date(2024, 1, 1), "b", (self.rent, 40, True), (self.cash, 40, False)),
            journal(date(2024, 2, 1), "c", (self.cash, 7, True), (self.sales, 7, False)),
        ]
        forward = compute_balances(self.accounts, [], journals)
        backward = compute_balances(self.accounts, [], list(reversed(journals)))
        assert forward == backward


class TestLedgerRows:
    """総勘定元帳"""

    def setup_method(self):
        self.cash = account("現金", AccountType.ASSET)
        self.sales = account("売上高", AccountType.REVENUE)
        self.rent = account("地代家賃", AccountType.EXPENSE)

    def test_opening_row_and_running_balance(self):
        journals = [
            journal(date(2024, 2, 1), "家賃", (self.rent, 20000, True), (self.cash, 20000, False)),
            journal(date(2024, 1, 10), "売上", (self.cash, 50000, True), (self.sales, 50000, False)),
        ]
        rows = ledger_rows(self.cash, 2024, opening(self.cash, 100000, True), journals)

        assert rows[0].is_opening
        assert rows[0].description == OPENING_DESCRIPTION
        assert rows[0].date == date(2024, 1, 1)
        assert rows[0].balance == 100000
        assert [r.balance for r in rows[1:]] == [150000, 130000]
        assert rows[1].counterparts == ["売上高"]
        assert rows[2].credit == 20000
        assert rows[-1].balance == compute_balances(
            [self.cash, self.sales, self.rent], [opening(self.cash, 100000, True)], journals
        )[self.cash.id]

    def test_without_opening_balance(self):
        journals = [journal(date(2024, 1, 10), "売上", (self.cash, 50000, True), (self.sales, 50000, False))]
        rows = ledger_rows(self.sales, 2024, None, journals)
        assert len(rows) == 1
        assert rows[0].balance == 50000
        assert not rows[0].is_opening


class TestBalanceEngineQueries:
    """DBからの読み込み"""

    def test_summary(self, db_session, user_id, sample_journals):
        summary = balance_engine.summary(db_session, user_id, 2024)
        assert summary["summary"]["REVENUE"] == 500000
        assert summary["summary"]["EXPENSE"] == 250000
        assert summary["net_income"] == 250000

    def test_other_year_is_empty(self, db_session, user_id, sample_journals):
        summary = balance_engine.summary(db_session, user_id, 2025)
        assert summary["net_income"] == 0

    def test_account_ledger(self, db_session, user_id, accounts, sample_journals):
        account_obj, rows = balance_engine.account_ledger(db_session, user_id, accounts["普通預金"].id, 2024)
        assert account_obj.name == "普通預金"
        assert [r.balance for r in rows] == [500000, 380000]
        assert rows[1].counterparts == ["地代家賃"]
