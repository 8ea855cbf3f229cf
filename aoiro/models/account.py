"""
勘定科目マスタモデル
"""

import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, Enum, Uuid, UniqueConstraint
from sqlalchemy.sql import func

from aoiro.models.database import Base


class AccountType(str, enum.Enum):
    """勘定科目の区分（定義順が一覧の並び順）"""

    ASSET = "ASSET"  # 資産
    LIABILITY = "LIABILITY"  # 負債
    EQUITY = "EQUITY"  # 純資産
    REVENUE = "REVENUE"  # 収益
    EXPENSE = "EXPENSE"  # 費用


# 貸借対照表に載る区分
BALANCE_SHEET_TYPES = (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)


class Account(Base):
    """勘定科目テーブル"""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_accounts_user_name"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    type = Column(Enum(AccountType, name="account_type"), nullable=False)
    description = Column(Text, default="")
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Account(name={self.name}, type={self.type})>"


# デフォルト勘定科目（初回利用時に作成）
# 費用は青色申告決算書の番号順
DEFAULT_ACCOUNTS = [
    # 資産
    {"name": "現金", "type": AccountType.ASSET, "description": "手元の現金"},
    {"name": "普通預金", "type": AccountType.ASSET, "description": "事業用口座の預金"},
    {"name": "売掛金", "type": AccountType.ASSET, "description": "未回収の売上代金"},
    {"name": "棚卸資産", "type": AccountType.ASSET, "description": "商品・製品の在庫"},
    {"name": "備品", "type": AccountType.ASSET, "description": "パソコンなど1年以上使用で10万円以上の物品"},
    {"name": "車両運搬具", "type": AccountType.ASSET, "description": "自動車・バイクなど"},
    {"name": "工具器具備品", "type": AccountType.ASSET, "description": "事業用に使われる工具や器具"},
    {"name": "ソフトウェア", "type": AccountType.ASSET, "description": "購入または自作のソフトウェア"},
    # 負債
    {"name": "買掛金", "type": AccountType.LIABILITY, "description": "未払いの仕入代金"},
    {"name": "未払金", "type": AccountType.LIABILITY, "description": "後払いの経費など"},
    # 純資産
    {"name": "元入金", "type": AccountType.EQUITY, "description": "事業主の元手"},
    {"name": "事業主借", "type": AccountType.EQUITY, "description": "個人から事業への資金移動"},
    {"name": "事業主貸", "type": AccountType.EQUITY, "description": "事業から個人への資金移動"},
    # 収益
    {"name": "売上高", "type": AccountType.REVENUE, "description": "事業の主な収入"},
    {"name": "雑収入", "type": AccountType.REVENUE, "description": "本業以外の少額な収入"},
    # 費用
    {"name": "租税公課", "type": AccountType.EXPENSE, "description": "固定資産税、自動車税などの税金や公的な負担金"},  # ⑧
    {"name": "荷造運賃", "type": AccountType.EXPENSE, "description": "商品の梱包・発送にかかる費用"},  # ⑨
    {"name": "水道光熱費", "type": AccountType.EXPENSE, "description": "電気・ガス・水道代"},  # ⑩
    {"name": "旅費交通費", "type": AccountType.EXPENSE, "description": "電車代・バス代・宿泊費など"},  # ⑪
    {"name": "通信費", "type": AccountType.EXPENSE, "description": "インターネット・携帯電話代など"},  # ⑫
    {"name": "広告宣伝費", "type": AccountType.EXPENSE, "description": "広告・宣伝にかかる費用"},  # ⑬
    {"name": "接待交際費", "type": AccountType.EXPENSE, "description": "取引先との飲食代や贈答品など"},  # ⑭
    {"name": "損害保険料", "type": AccountType.EXPENSE, "description": "事業に関する損害保険の保険料"},  # ⑮
    {"name": "修繕費", "type": AccountType.EXPENSE, "description": "店舗や備品の修理代"},  # ⑯
    {"name": "消耗品費", "type": AccountType.EXPENSE, "description": "10万円未満の物品購入費など"},  # ⑰
    {"name": "減価償却費", "type": AccountType.EXPENSE, "description": "固定資産などの価値減少分"},  # ⑱
    {"name": "福利厚生費", "type": AccountType.EXPENSE, "description": "従業員の福利厚生に関する費用"},  # ⑲
    {"name": "給料賃金", "type": AccountType.EXPENSE, "description": "従業員への給与・賞与"},  # ⑳
    {"name": "外注工賃", "type": AccountType.EXPENSE, "description": "外部の業者や個人への業務委託費"},  # ㉑
    {"name": "利子割引料", "type": AccountType.EXPENSE, "description": "借入金の利息や手形割引料"},  # ㉒
    {"name": "地代家賃", "type": AccountType.EXPENSE, "description": "事務所や店舗の家賃"},  # ㉓
    {"name": "貸倒金", "type": AccountType.EXPENSE, "description": "回収不能となった売掛金等"},  # ㉔
    {"name": "雑費", "type": AccountType.EXPENSE, "description": "他の科目に当てはまらない少額な経費"},  # ㉛
    {"name": "仕入高", "type": AccountType.EXPENSE, "description": "商品の仕入原価"},  # ③
    {"name": "支払手数料", "type": AccountType.EXPENSE, "description": "振込手数料や仲介手数料など"},  # ㉕
    {"name": "専従者給与", "type": AccountType.EXPENSE, "description": "青色事業専従者（家族従業員）への給与"},  # ㊳
]
