"""
期首残高モデル
"""

import uuid

from sqlalchemy import Column, String, Integer, BigInteger, Boolean, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from aoiro.models.database import Base


class OpeningBalance(Base):
    """期首残高テーブル（ユーザー・年度・勘定科目ごとに1行）"""

    __tablename__ = "opening_balances"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "account_id", name="uq_opening_balances_user_year_account"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    account_id = Column(Uuid, ForeignKey("accounts.id"), nullable=False)
    amount = Column(BigInteger, nullable=False, default=0)
    is_debit = Column(Boolean, nullable=False)

    account = relationship("Account")

    def __repr__(self):
        side = "借方" if self.is_debit else "貸方"
        return f"<OpeningBalance(year={self.year}, account_id={self.account_id}, {side} {self.amount})>"
