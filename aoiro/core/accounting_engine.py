"""
会計エンジン
仕訳の検証・登録・修正・削除と期首残高の登録
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
import logging
import uuid

from sqlalchemy.orm import Session, selectinload

from aoiro.core.account_registry import to_account_type
from aoiro.core.exceptions import ErrorCode, NotFoundOrUnauthorizedError, ValidationError
from aoiro.core.fiscal_year import validate_year, year_range
from aoiro.models.account import Account, BALANCE_SHEET_TYPES
from aoiro.models.journal import Journal, JournalEntry
from aoiro.models.opening_balance import OpeningBalance

logger = logging.getLogger(__name__)

UNBALANCED_MESSAGE = "借方と貸方の合計金額が一致しません"


@dataclass
class PostingInput:
    account_id: uuid.UUID
    amount: int
    is_debit: bool


@dataclass
class JournalInput:
    date: date
    description: str
    postings: List[PostingInput]


def parse_date(value: Any) -> Optional[date]:
    """date または YYYY-MM-DD 文字列を日付に"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def parse_amount(value: Any) -> Optional[int]:
    """円単位の整数金額。小数や真偽値は不可"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class AccountingEngine:
    """会計処理エンジン"""

    def _parse_entry(self, entry: Dict) -> Tuple[Optional[JournalInput], List[str]]:
        errors = []

        entry_date = parse_date(entry.get("date"))
        if entry_date is None:
            errors.append("日付はYYYY-MM-DD形式で入力してください")

        description = (entry.get("description") or "").strip()
        if not description:
            errors.append("摘要は必須です")

        raw_postings = entry.get("entries") or []
        if not isinstance(raw_postings, list) or len(raw_postings) < 2:
            errors.append("仕訳には借方と貸方の明細が必要です")
            raw_postings = raw_postings if isinstance(raw_postings, list) else []

        postings = []
        for i, raw in enumerate(raw_postings, start=1):
            account_id = parse_uuid(raw.get("account_id"))
            if account_id is None:
                errors.append(f"{i}行目: 勘定科目を選択してください")
            amount = parse_amount(raw.get("amount"))
            if amount is None:
                errors.append(f"{i}行目: 金額は整数で入力してください")
            elif amount <= 0:
                errors.append(f"{i}行目: 金額は1円以上で入力してください")
            is_debit = raw.get("is_debit")
            if not isinstance(is_debit, bool):
                errors.append(f"{i}行目: 借方・貸方を指定してください")
            if account_id is not None and amount is not None and amount > 0 and isinstance(is_debit, bool):
                postings.append(PostingInput(account_id, amount, is_debit))

        if postings and len(postings) == len(raw_postings):
            debit_total = sum(p.amount for p in postings if p.is_debit)
            credit_total = sum(p.amount for p in postings if not p.is_debit)
            if debit_total == 0 or credit_total == 0:
                errors.append("借方と貸方の両方に明細が必要です")
            elif debit_total != credit_total:
                errors.append(UNBALANCED_MESSAGE)

        if errors:
            return None, errors
        return JournalInput(entry_date, description, postings), []

    def validate_entry(self, entry: Dict) -> List[str]:
        """
        仕訳の妥当性検証
        エラーメッセージのリストを返す（空なら妥当）
        """
        _, errors = self._parse_entry(entry)
        return errors

    def _require_valid(self, db: Session, user_id: str, entry: Dict) -> JournalInput:
        parsed, errors = self._parse_entry(entry)
        if errors:
            code = ErrorCode.UNBALANCED_JOURNAL if UNBALANCED_MESSAGE in errors else ErrorCode.VALIDATION_ERROR
            raise ValidationError(errors[0], errors=errors, code=code)

        # 勘定科目が本人のものか
        account_ids = {p.account_id for p in parsed.postings}
        owned = {
            row.id
            for row in db.query(Account.id).filter(Account.user_id == user_id, Account.id.in_(account_ids)).all()
        }
        missing = account_ids - owned
        if missing:
            raise NotFoundOrUnauthorizedError("勘定科目", next(iter(missing)))
        return parsed

    def create_journal_entry(self, db: Session, user_id: str, entry: Dict) -> Journal:
        """
        仕訳を検証してDBに保存
        """
        parsed = self._require_valid(db, user_id, entry)
        try:
            journal = Journal(
                user_id=user_id,
                date=parsed.date,
                description=parsed.description,
                entries=[
                    JournalEntry(account_id=p.account_id, amount=p.amount, is_debit=p.is_debit)
                    for p in parsed.postings
                ],
            )
            db.add(journal)
            db.commit()
            db.refresh(journal)
        except Exception as e:
            logger.error(f"Failed to create journal entry: {e}")
            db.rollback()
            raise

        logger.info(f"Journal created: {journal.id}")
        return journal

    def get_journal(self, db: Session, user_id: str, journal_id) -> Journal:
        journal_uuid = parse_uuid(journal_id)
        journal = None
        if journal_uuid is not None:
            journal = (
                db.query(Journal)
                .options(selectinload(Journal.entries))
                .filter(Journal.id == journal_uuid, Journal.user_id == user_id)
                .first()
            )
        if not journal:
            raise NotFoundOrUnauthorizedError("仕訳", journal_id)
        return journal

    def update_journal_entry(self, db: Session, user_id: str, journal_id, entry: Dict) -> Journal:
        """
        仕訳を修正
        明細は全て置き換える（日付・摘要・明細を1トランザクションで更新）
        """
        journal = self.get_journal(db, user_id, journal_id)
        parsed = self._require_valid(db, user_id, entry)
        try:
            journal.date = parsed.date
            journal.description = parsed.description
            journal.entries.clear()
            db.flush()
            journal.entries.extend(
                JournalEntry(account_id=p.account_id, amount=p.amount, is_debit=p.is_debit)
                for p in parsed.postings
            )
            db.commit()
            db.refresh(journal)
        except Exception as e:
            logger.error(f"Failed to update journal {journal_id}: {e}")
            db.rollback()
            raise

        logger.info(f"Journal updated: {journal.id}")
        return journal

    def delete_transaction(self, db: Session, user_id: str, journal_id) -> None:
        """
        仕訳を削除（明細も削除される）
        """
        journal = self.get_journal(db, user_id, journal_id)
        try:
            db.delete(journal)
            db.commit()
        except Exception as e:
            logger.error(f"Failed to delete journal: {e}")
            db.rollback()
            raise
        logger.info(f"Journal deleted: {journal_id}")

    def get_user_transactions(self, db: Session, user_id: str, year: int) -> List[Journal]:
        """
        年度内の仕訳を新しい順に取得
        """
        start, end = year_range(year)
        return (
            db.query(Journal)
            .options(selectinload(Journal.entries).selectinload(JournalEntry.account))
            .filter(
                Journal.user_id == user_id,
                Journal.date >= start,
                Journal.date < end,
            )
            .order_by(Journal.date.desc(), Journal.created_at.desc())
            .all()
        )

    def set_opening_balance(
        self,
        db: Session,
        user_id: str,
        year: int,
        account_id,
        amount,
        is_debit: bool,
    ) -> OpeningBalance:
        """
        期首残高を登録（同じ年度・科目があれば置き換え）
        """
        validate_year(year)
        amount_value = parse_amount(amount)
        if amount_value is None or amount_value < 0:
            raise ValidationError("期首残高は0以上の整数で入力してください", code=ErrorCode.INVALID_AMOUNT)
        if not isinstance(is_debit, bool):
            raise ValidationError("借方・貸方を指定してください")

        account_uuid = parse_uuid(account_id)
        account = None
        if account_uuid is not None:
            account = db.query(Account).filter(Account.id == account_uuid, Account.user_id == user_id).first()
        if not account:
            raise NotFoundOrUnauthorizedError("勘定科目", account_id)
        if to_account_type(account.type) not in BALANCE_SHEET_TYPES:
            raise ValidationError("期首残高は資産・負債・純資産の科目にのみ設定できます")

        try:
            balance = (
                db.query(OpeningBalance)
                .filter(
                    OpeningBalance.user_id == user_id,
                    OpeningBalance.year == year,
                    OpeningBalance.account_id == account.id,
                )
                .first()
            )
            if balance is None:
                balance = OpeningBalance(user_id=user_id, year=year, account_id=account.id)
                db.add(balance)
            balance.amount = amount_value
            balance.is_debit = is_debit
            db.commit()
            db.refresh(balance)
        except Exception as e:
            logger.error(f"Failed to set opening balance: {e}")
            db.rollback()
            raise

        logger.info(f"Opening balance set: {account.name} {year} {amount_value}")
        return balance

    def list_opening_balances(self, db: Session, user_id: str, year: int) -> List[OpeningBalance]:
        validate_year(year)
        return (
            db.query(OpeningBalance)
            .options(selectinload(OpeningBalance.account))
            .filter(OpeningBalance.user_id == user_id, OpeningBalance.year == year)
            .all()
        )


accounting_engine = AccountingEngine()
