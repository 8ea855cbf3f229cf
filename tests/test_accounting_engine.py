"""
会計エンジンのテスト
"""

import uuid
from datetime import date

import pytest

from aoiro.core.accounting_engine import AccountingEngine, parse_amount, parse_date, UNBALANCED_MESSAGE
from aoiro.core.exceptions import ErrorCode, NotFoundOrUnauthorizedError, ValidationError
from aoiro.models.journal import Journal, JournalEntry
from aoiro.models.opening_balance import OpeningBalance


def _entry(debit_amount=1000, credit_amount=1000):
    return {
        "date": "2024-01-15",
        "description": "電車代",
        "entries": [
            {"account_id": str(uuid.uuid4()), "amount": debit_amount, "is_debit": True},
            {"account_id": str(uuid.uuid4()), "amount": credit_amount, "is_debit": False},
        ],
    }


class TestParsing:
    """入力値の変換"""

    def test_parse_date(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)
        assert parse_date(date(2024, 1, 15)) == date(2024, 1, 15)
        assert parse_date("2024/01/15") is None
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_parse_amount(self):
        assert parse_amount(1000) == 1000
        assert parse_amount("1000") == 1000
        assert parse_amount(1000.5) is None
        assert parse_amount(True) is None
        assert parse_amount("abc") is None


class TestValidateEntry:
    """仕訳検証のテスト"""

    def setup_method(self):
        self.engine = AccountingEngine()

    def test_validate_entry_valid(self):
        """正常な仕訳"""
        assert self.engine.validate_entry(_entry()) == []

    def test_validate_entry_unbalanced(self):
        """貸借不一致"""
        errors = self.engine.validate_entry(_entry(1000, 900))
        assert UNBALANCED_MESSAGE in errors

    def test_validate_entry_missing_fields(self):
        """必須項目なし"""
        errors = self.engine.validate_entry({"date": "", "description": "  ", "entries": []})
        assert "日付はYYYY-MM-DD形式で入力してください" in errors
        assert "摘要は必須です" in errors
        assert "仕訳には借方と貸方の明細が必要です" in errors

    def test_validate_entry_non_positive_amount(self):
        """金額は1円以上"""
        errors = self.engine.validate_entry(_entry(0, 0))
        assert any("1円以上" in e for e in errors)

    def test_validate_entry_one_sided(self):
        """借方だけの仕訳"""
        entry = _entry()
        entry["entries"][1]["is_debit"] = True
        errors = self.engine.validate_entry(entry)
        assert "借方と貸方の両方に明細が必要です" in errors

    def test_validate_entry_compound(self):
        """複合仕訳（借方2行・貸方1行）"""
        entry = _entry()
        entry["entries"] = [
            {"account_id": str(uuid.uuid4()), "amount": 700, "is_debit": True},
            {"account_id": str(uuid.uuid4()), "amount": 300, "is_debit": True},
            {"account_id": str(uuid.uuid4()), "amount": 1000, "is_debit": False},
        ]
        assert self.engine.validate_entry(entry) == []


class TestJournalPersistence:
    """仕訳の登録・修正・削除"""

    def setup_method(self):
        self.engine = AccountingEngine()

    def _payload(self, accounts, amount=1000, description="電車代"):
        return {
            "date": "2024-04-01",
            "description": description,
            "entries": [
                {"account_id": str(accounts["旅費交通費"].id), "amount": amount, "is_debit": True},
                {"account_id": str(accounts["現金"].id), "amount": amount, "is_debit": False},
            ],
        }

    def test_create_journal_entry(self, db_session, user_id, accounts):
        journal = self.engine.create_journal_entry(db_session, user_id, self._payload(accounts))
        assert journal.date == date(2024, 4, 1)
        assert journal.debit_total == journal.credit_total == 1000
        assert len(journal.entries) == 2

    def test_create_unbalanced_is_not_written(self, db_session, user_id, accounts):
        payload = self._payload(accounts)
        payload["entries"][1]["amount"] = 999
        with pytest.raises(ValidationError) as exc_info:
            self.engine.create_journal_entry(db_session, user_id, payload)
        assert exc_info.value.code == ErrorCode.UNBALANCED_JOURNAL
        assert db_session.query(Journal).count() == 0

    def test_create_with_other_users_account(self, db_session, user_id, accounts):
        with pytest.raises(NotFoundOrUnauthorizedError):
            self.engine.create_journal_entry(db_session, "someone_else", self._payload(accounts))
        assert db_session.query(Journal).count() == 0

    def test_update_replaces_entries(self, db_session, user_id, accounts):
        journal = self.engine.create_journal_entry(db_session, user_id, self._payload(accounts))
        updated = self.engine.update_journal_entry(
            db_session, user_id, journal.id, self._payload(accounts, amount=2500, description="新幹線")
        )
        assert updated.id == journal.id
        assert updated.description == "新幹線"
        assert sorted(e.amount for e in updated.entries) == [2500, 2500]
        assert db_session.query(JournalEntry).count() == 2

    def test_update_invalid_keeps_original(self, db_session, user_id, accounts):
        journal = self.engine.create_journal_entry(db_session, user_id, self._payload(accounts))
        payload = self._payload(accounts, amount=2500)
        payload["entries"][0]["amount"] = 100
        with pytest.raises(ValidationError):
            self.engine.update_journal_entry(db_session, user_id, journal.id, payload)
        db_session.expire_all()
        assert sorted(e.amount for e in self.engine.get_journal(db_session, user_id, journal.id).entries) == [
            1000,
            1000,
        ]

    def test_delete_cascades_entries(self, db_session, user_id, accounts):
        journal = self.engine.create_journal_entry(db_session, user_id, self._payload(accounts))
        self.engine.delete_transaction(db_session, user_id, journal.id)
        assert db_session.query(Journal).count() == 0
        assert db_session.query(JournalEntry).count() == 0

    def test_delete_other_users_journal(self, db_session, user_id, accounts):
        journal = self.engine.create_journal_entry(db_session, user_id, self._payload(accounts))
        with pytest.raises(NotFoundOrUnauthorizedError):
            self.engine.delete_transaction(db_session, "someone_else", journal.id)
        with pytest.raises(NotFoundOrUnauthorizedError):
            self.engine.delete_transaction(db_session, user_id, "not-a-uuid")
        assert db_session.query(Journal).count() == 1

    def test_get_user_transactions_newest_first(self, db_session, user_id, sample_journals):
        journals = self.engine.get_user_transactions(db_session, user_id, 2024)
        assert [j.date for j in journals] == sorted((j.date for j in sample_journals), reverse=True)
        assert self.engine.get_user_transactions(db_session, user_id, 2023) == []


class TestOpeningBalance:
    """期首残高の登録"""

    def setup_method(self):
        self.engine = AccountingEngine()

    def test_set_opening_balance_upsert(self, db_session, user_id, accounts):
        cash = accounts["現金"]
        self.engine.set_opening_balance(db_session, user_id, 2024, cash.id, 100000, True)
        self.engine.set_opening_balance(db_session, user_id, 2024, cash.id, 80000, True)

        rows = db_session.query(OpeningBalance).filter_by(user_id=user_id, year=2024).all()
        assert len(rows) == 1
        assert rows[0].amount == 80000

    def test_rejects_profit_and_loss_account(self, db_session, user_id, accounts):
        with pytest.raises(ValidationError):
            self.engine.set_opening_balance(db_session, user_id, 2024, accounts["売上高"].id, 1000, False)

    def test_rejects_negative_amount(self, db_session, user_id, accounts):
        with pytest.raises(ValidationError) as exc_info:
            self.engine.set_opening_balance(db_session, user_id, 2024, accounts["現金"].id, -1, True)
        assert exc_info.value.code == ErrorCode.INVALID_AMOUNT
