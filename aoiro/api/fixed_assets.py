"""
固定資産・減価償却エンドポイント
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aoiro.api.dependencies import get_current_user_id, get_selected_year
from aoiro.api.schemas import FixedAssetCreate, fixed_asset_out
from aoiro.core.depreciation import depreciation_scheduler
from aoiro.models.database import get_db

router = APIRouter()


@router.get("")
def list_fixed_assets(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    assets = depreciation_scheduler.list_assets(db, user_id)
    return {"fixed_assets": [fixed_asset_out(a) for a in assets]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_fixed_asset(
    body: FixedAssetCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """固定資産を登録"""
    asset = depreciation_scheduler.register_asset(
        db,
        user_id,
        body.name,
        body.acquisition_date,
        body.acquisition_cost,
        body.useful_life,
    )
    return fixed_asset_out(asset)


@router.post("/depreciate")
def depreciate(
    user_id: str = Depends(get_current_user_id),
    year: int = Depends(get_selected_year),
    db: Session = Depends(get_db),
):
    """選択中の年度の減価償却を計上"""
    result = depreciation_scheduler.run_depreciation(db, user_id, year)
    return result.to_dict()
