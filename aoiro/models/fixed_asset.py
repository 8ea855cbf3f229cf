"""
固定資産台帳モデル
"""

import uuid

from sqlalchemy import Column, String, Integer, BigInteger, Date, DateTime, Uuid
from sqlalchemy.sql import func

from aoiro.models.database import Base

STRAIGHT_LINE = "STRAIGHT_LINE"  # 定額法


class FixedAsset(Base):
    """固定資産テーブル"""

    __tablename__ = "fixed_assets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    acquisition_date = Column(Date, nullable=False)
    acquisition_cost = Column(BigInteger, nullable=False)
    useful_life = Column(Integer, nullable=False)  # 耐用年数（年）
    depreciation_type = Column(String(20), nullable=False, default=STRAIGHT_LINE)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<FixedAsset(name={self.name}, cost={self.acquisition_cost}, life={self.useful_life})>"
