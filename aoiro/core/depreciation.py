"""
減価償却エンジン
固定資産台帳から年度の減価償却費（定額法）を計算し、1件の仕訳として計上する
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging
import uuid

from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aoiro.core.account_registry import account_registry
from aoiro.core.exceptions import DepreciationAlreadyPostedError, ValidationError
from aoiro.core.fiscal_year import validate_year, year_end, year_range
from aoiro.models.account import AccountType
from aoiro.models.fixed_asset import FixedAsset, STRAIGHT_LINE
from aoiro.models.journal import Journal, JournalEntry, JournalSource

logger = logging.getLogger(__name__)

DEPRECIATION_EXPENSE_ACCOUNT = {
    "name": "減価償却費",
    "account_type": AccountType.EXPENSE,
    "description": "固定資産の価値減少分",
}

# 資産のマイナスとして扱う評価勘定（区分は資産）
ACCUMULATED_DEPRECIATION_ACCOUNT = {
    "name": "減価償却累計額",
    "account_type": AccountType.ASSET,
    "description": "資産から控除される減価償却の累計",
}


def depreciation_description(year: int) -> str:
    return f"{year}年度 減価償却費計上"


@dataclass
class AssetDepreciation:
    """資産ごとの償却額"""

    asset_name: str
    amount: int
    skipped: bool = False
    reason: Optional[str] = None
    asset_id: Optional[uuid.UUID] = None

    def to_dict(self) -> Dict:
        data = {"asset_name": self.asset_name, "amount": self.amount}
        if self.skipped:
            data["skipped"] = True
            data["reason"] = self.reason
        return data


@dataclass
class DepreciationResult:
    year: int
    total_depreciation: int
    entries: List[AssetDepreciation] = field(default_factory=list)
    journal_id: Optional[uuid.UUID] = None
    message: Optional[str] = None

    @property
    def posted(self) -> bool:
        return self.journal_id is not None

    def to_dict(self) -> Dict:
        return {
            "success": self.posted,
            "year": self.year,
            "total_depreciation": self.total_depreciation,
            "entries": [e.to_dict() for e in self.entries],
            "journal_id": str(self.journal_id) if self.journal_id else None,
            "message": self.message,
        }


def annual_charge(asset: Any, year: int) -> AssetDepreciation:
    """
    定額法の年間償却額 = 取得価額 // 耐用年数（端数切り捨て）
    取得年から耐用年数の間だけ償却する
    """
    acquisition_year = asset.acquisition_date.year
    end_year = acquisition_year + asset.useful_life
    asset_id = getattr(asset, "id", None)

    if (asset.depreciation_type or STRAIGHT_LINE) != STRAIGHT_LINE:
        return AssetDepreciation(
            asset.name, 0, skipped=True, reason=f"未対応の償却方法です（{asset.depreciation_type}）", asset_id=asset_id
        )
    if year < acquisition_year:
        return AssetDepreciation(
            asset.name, 0, skipped=True, reason=f"取得日（{acquisition_year}年）より前の年度です", asset_id=asset_id
        )
    if year >= end_year:
        return AssetDepreciation(
            asset.name, 0, skipped=True, reason=f"耐用年数（{asset.useful_life}年）を超過しています", asset_id=asset_id
        )
    return AssetDepreciation(asset.name, asset.acquisition_cost // asset.useful_life, asset_id=asset_id)


def schedule_depreciation(assets: Iterable[Any], year: int) -> Tuple[int, List[AssetDepreciation]]:
    """全資産の償却額を計算して (合計, 内訳) を返す"""
    entries = [annual_charge(asset, year) for asset in assets]
    total = sum(e.amount for e in entries if not e.skipped)
    return total, entries


def _positive_int(value: Any, label: str, errors: List[str]) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        errors.append(f"{label}は正の整数で入力してください")
        return None
    try:
        number = int(value)
    except ValueError:
        errors.append(f"{label}は正の整数で入力してください")
        return None
    if number <= 0:
        errors.append(f"{label}は1以上で入力してください")
        return None
    return number


class DepreciationScheduler:
    """減価償却の計上"""

    def register_asset(
        self,
        db: Session,
        user_id: str,
        name: str,
        acquisition_date,
        acquisition_cost,
        useful_life,
    ) -> FixedAsset:
        """固定資産を登録（償却方法は定額法）"""
        errors = []
        if not name or not str(name).strip():
            errors.append("資産名は必須です")

        if isinstance(acquisition_date, str):
            try:
                acquisition_date = datetime.strptime(acquisition_date, "%Y-%m-%d").date()
            except ValueError:
                errors.append("取得日はYYYY-MM-DD形式で入力してください")
                acquisition_date = None
        elif not isinstance(acquisition_date, date):
            errors.append("取得日は必須です")
            acquisition_date = None

        cost = _positive_int(acquisition_cost, "取得価額", errors)
        life = _positive_int(useful_life, "耐用年数", errors)

        if errors:
            raise ValidationError(errors[0], errors=errors)

        try:
            asset = FixedAsset(
                user_id=user_id,
                name=str(name).strip(),
                acquisition_date=acquisition_date,
                acquisition_cost=cost,
                useful_life=life,
                depreciation_type=STRAIGHT_LINE,
            )
            db.add(asset)
            db.commit()
            db.refresh(asset)
        except Exception as e:
            logger.error(f"Failed to create fixed asset: {e}")
            db.rollback()
            raise

        logger.info(f"Fixed asset registered: {asset.name} ({asset.acquisition_cost}円 / {asset.useful_life}年)")
        return asset

    def list_assets(self, db: Session, user_id: str) -> List[FixedAsset]:
        return (
            db.query(FixedAsset)
            .filter(FixedAsset.user_id == user_id)
            .order_by(FixedAsset.acquisition_date, FixedAsset.name)
            .all()
        )

    def find_existing_run(self, db: Session, user_id: str, year: int) -> Optional[Journal]:
        """
        同一年度の減価償却仕訳を探す
        自動生成マーカー、または摘要と日付範囲（マーカー導入前の仕訳向け）で判定
        """
        start, end = year_range(year)
        return (
            db.query(Journal)
            .filter(
                Journal.user_id == user_id,
                or_(
                    and_(
                        Journal.source == JournalSource.DEPRECIATION,
                        Journal.fiscal_year == year,
                    ),
                    and_(
                        Journal.description.contains(depreciation_description(year)),
                        Journal.date >= start,
                        Journal.date < end,
                    ),
                ),
            )
            .first()
        )

    def run_depreciation(self, db: Session, user_id: str, year: int) -> DepreciationResult:
        """
        年度の減価償却を計上
        借方 減価償却費 / 貸方 減価償却累計額 の仕訳を12月31日付で1件作成
        """
        validate_year(year)

        if self.find_existing_run(db, user_id, year):
            logger.warning(f"Depreciation for {year} already posted for user {user_id}")
            raise DepreciationAlreadyPostedError(year)

        assets = self.list_assets(db, user_id)
        if not assets:
            return DepreciationResult(year, 0, message="登録された固定資産がありません")

        total, entries = schedule_depreciation(assets, year)
        if total <= 0:
            return DepreciationResult(year, 0, entries, message=f"{year}年度に償却対象となる資産がありません")

        try:
            expense_account = account_registry.get_or_create(db, user_id, **DEPRECIATION_EXPENSE_ACCOUNT)
            accumulated_account = account_registry.get_or_create(db, user_id, **ACCUMULATED_DEPRECIATION_ACCOUNT)

            journal = Journal(
                user_id=user_id,
                date=year_end(year),
                description=depreciation_description(year),
                source=JournalSource.DEPRECIATION,
                fiscal_year=year,
                entries=[
                    JournalEntry(account_id=expense_account.id, amount=total, is_debit=True),
                    JournalEntry(account_id=accumulated_account.id, amount=total, is_debit=False),
                ],
            )
            db.add(journal)
            db.commit()
            db.refresh(journal)
        except IntegrityError:
            # 同時実行で先に計上された
            db.rollback()
            logger.warning(f"Concurrent depreciation run detected for {year}, user {user_id}")
            raise DepreciationAlreadyPostedError(year)
        except Exception as e:
            logger.error(f"Depreciation error: {e}")
            db.rollback()
            raise

        logger.info(f"Depreciation posted for {year}: {total}円 ({len(entries)} assets)")
        return DepreciationResult(year, total, entries, journal_id=journal.id, message="減価償却費を計上しました")


depreciation_scheduler = DepreciationScheduler()
