"""
APIのリクエストボディ
形式のチェックのみ行い、業務上の検証は会計エンジン側で行う
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    name: str
    type: str
    description: Optional[str] = ""


class JournalEntryIn(BaseModel):
    account_id: str
    amount: int
    is_debit: bool


class JournalIn(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    description: str = ""
    entries: List[JournalEntryIn] = []


class OpeningBalanceIn(BaseModel):
    account_id: str
    amount: int
    is_debit: bool
    year: Optional[int] = None


class FixedAssetCreate(BaseModel):
    name: str
    acquisition_date: str = Field(..., description="YYYY-MM-DD")
    acquisition_cost: int
    useful_life: int


class ClosingRequest(BaseModel):
    year: int


def account_out(account) -> dict:
    return {
        "id": str(account.id),
        "name": account.name,
        "type": account.type.value,
        "description": account.description or "",
    }


def journal_out(journal) -> dict:
    return {
        "id": str(journal.id),
        "date": journal.date.isoformat(),
        "description": journal.description,
        "source": journal.source,
        "entries": [
            {
                "id": str(entry.id),
                "account_id": str(entry.account_id),
                "account_name": entry.account.name if entry.account else None,
                "amount": entry.amount,
                "is_debit": entry.is_debit,
            }
            for entry in journal.entries
        ],
        "debit_total": journal.debit_total,
        "credit_total": journal.credit_total,
    }


def opening_balance_out(balance) -> dict:
    return {
        "id": str(balance.id),
        "year": balance.year,
        "account_id": str(balance.account_id),
        "account_name": balance.account.name if balance.account else None,
        "amount": balance.amount,
        "is_debit": balance.is_debit,
    }


def fixed_asset_out(asset) -> dict:
    return {
        "id": str(asset.id),
        "name": asset.name,
        "acquisition_date": asset.acquisition_date.isoformat(),
        "acquisition_cost": asset.acquisition_cost,
        "useful_life": asset.useful_life,
        "depreciation_type": asset.depreciation_type,
    }
