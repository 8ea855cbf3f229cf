"""
データモデル
"""

from aoiro.models.database import Base, engine, SessionLocal, get_db
from aoiro.models.account import Account, AccountType, BALANCE_SHEET_TYPES, DEFAULT_ACCOUNTS
from aoiro.models.journal import Journal, JournalEntry, JournalSource
from aoiro.models.opening_balance import OpeningBalance
from aoiro.models.fixed_asset import FixedAsset, STRAIGHT_LINE

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "Account",
    "AccountType",
    "BALANCE_SHEET_TYPES",
    "DEFAULT_ACCOUNTS",
    "Journal",
    "JournalEntry",
    "JournalSource",
    "OpeningBalance",
    "FixedAsset",
    "STRAIGHT_LINE",
]
