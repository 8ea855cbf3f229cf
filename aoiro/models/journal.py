"""
仕訳データモデル
1件の仕訳（Journal）が複数の明細（JournalEntry）を持つ
"""

import uuid

from sqlalchemy import (
    Column,
    String,
    Integer,
    BigInteger,
    Boolean,
    Date,
    Text,
    DateTime,
    ForeignKey,
    Uuid,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from aoiro.models.database import Base


class JournalSource:
    """システムが自動生成する仕訳の種別"""

    DEPRECIATION = "DEPRECIATION"


class Journal(Base):
    """仕訳テーブル"""

    __tablename__ = "journals"
    __table_args__ = (
        # 自動生成仕訳は (ユーザー, 種別, 年度) で一意。手入力仕訳は source が NULL
        UniqueConstraint("user_id", "source", "fiscal_year", name="uq_journals_system_generated"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False)  # 摘要（支払先としても使う）
    source = Column(String(20))
    fiscal_year = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # リレーションシップ
    entries = relationship(
        "JournalEntry",
        back_populates="journal",
        cascade="all, delete-orphan",
    )

    @property
    def debit_total(self) -> int:
        return sum(e.amount for e in self.entries if e.is_debit)

    @property
    def credit_total(self) -> int:
        return sum(e.amount for e in self.entries if not e.is_debit)

    def __repr__(self):
        return f"<Journal(id={self.id}, date={self.date}, description={self.description})>"


class JournalEntry(Base):
    """仕訳明細テーブル（借方・貸方の1行）"""

    __tablename__ = "journal_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    journal_id = Column(Uuid, ForeignKey("journals.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Uuid, ForeignKey("accounts.id"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    is_debit = Column(Boolean, nullable=False)

    # リレーションシップ
    journal = relationship("Journal", back_populates="entries")
    account = relationship("Account")

    def __repr__(self):
        side = "借方" if self.is_debit else "貸方"
        return f"<JournalEntry(account_id={self.account_id}, {side} {self.amount})>"
