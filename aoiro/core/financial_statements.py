"""
決算書生成エンジン
青色申告決算書（損益計算書）と貸借対照表を残高から組み立てる

損益計算書は欄番号ごとの定義（テンプレート）を順に評価する。
欄の種類:
    Lookup   勘定科目名で残高を引く（複数なら合計、科目がなければ0）
    Formula  他の欄の加減算
    Constant 固定値
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union
import logging

from sqlalchemy.orm import Session

from aoiro.core.account_registry import ACCOUNT_TYPE_LABELS, sort_accounts, to_account_type
from aoiro.core.balance_engine import balance_engine, net_income
from aoiro.models.account import AccountType

logger = logging.getLogger(__name__)

# 青色申告特別控除額（65万円）
BLUE_RETURN_SPECIAL_DEDUCTION = 650000


@dataclass(frozen=True)
class Lookup:
    account_names: Tuple[str, ...]


@dataclass(frozen=True)
class Formula:
    plus: Tuple[int, ...]
    minus: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Constant:
    value: int


SlotKind = Union[Lookup, Formula, Constant]


@dataclass(frozen=True)
class TemplateSlot:
    number: int
    label: str
    kind: SlotKind

    @property
    def mark(self) -> str:
        return circled_number(self.number)


def circled_number(n: int) -> str:
    """1〜50 を丸数字に"""
    if 1 <= n <= 20:
        return chr(0x2460 + n - 1)
    if 21 <= n <= 35:
        return chr(0x3251 + n - 21)
    if 36 <= n <= 50:
        return chr(0x32B1 + n - 36)
    return str(n)


def _lookup(*names: str) -> Lookup:
    return Lookup(tuple(names))


# 経費欄 ⑧〜㉔
_EXPENSE_SLOTS = [
    (8, "租税公課"),
    (9, "荷造運賃"),
    (10, "水道光熱費"),
    (11, "旅費交通費"),
    (12, "通信費"),
    (13, "広告宣伝費"),
    (14, "接待交際費"),
    (15, "損害保険料"),
    (16, "修繕費"),
    (17, "消耗品費"),
    (18, "減価償却費"),
    (19, "福利厚生費"),
    (20, "給料賃金"),
    (21, "外注工賃"),
    (22, "利子割引料"),
    (23, "地代家賃"),
    (24, "貸倒金"),
]

INCOME_STATEMENT_TEMPLATE: List[TemplateSlot] = (
    [
        TemplateSlot(1, "売上(収入)金額", _lookup("売上高", "雑収入")),
        TemplateSlot(2, "期首商品棚卸高", Constant(0)),
        TemplateSlot(3, "仕入金額", _lookup("仕入高")),
        TemplateSlot(4, "小計(②+③)", Formula((2, 3))),
        TemplateSlot(5, "期末商品棚卸高", Constant(0)),
        TemplateSlot(6, "差引原価(④-⑤)", Formula((4,), (5,))),
        TemplateSlot(7, "差引金額(①-⑥)", Formula((1,), (6,))),
    ]
    + [TemplateSlot(number, name, _lookup(name)) for number, name in _EXPENSE_SLOTS]
    + [
        TemplateSlot(25, "支払手数料", _lookup("支払手数料")),
        # ㉖〜㉚ は利用者追加用の予備欄
        TemplateSlot(26, "", Constant(0)),
        TemplateSlot(27, "", Constant(0)),
        TemplateSlot(28, "", Constant(0)),
        TemplateSlot(29, "", Constant(0)),
        TemplateSlot(30, "", Constant(0)),
        TemplateSlot(31, "雑費", _lookup("雑費")),
        TemplateSlot(32, "経費計", Formula(tuple(range(8, 32)))),
        TemplateSlot(33, "差引金額(⑦-㉜)", Formula((7,), (32,))),
        # 繰戻額等
        TemplateSlot(34, "貸倒引当金", Constant(0)),
        TemplateSlot(37, "繰戻額等 計", Formula((34,))),
        # 繰入額等
        TemplateSlot(38, "専従者給与", _lookup("専従者給与")),
        TemplateSlot(39, "貸倒引当金", Constant(0)),
        TemplateSlot(42, "繰入額等 計", Formula((38, 39))),
        TemplateSlot(43, "青色申告特別控除前の所得金額(㉝+㊲-㊷)", Formula((33, 37), (42,))),
        TemplateSlot(44, "青色申告特別控除額", Constant(BLUE_RETURN_SPECIAL_DEDUCTION)),
        TemplateSlot(45, "所得金額(㊸-㊹)", Formula((43,), (44,))),
    ]
)


@dataclass
class StatementLine:
    number: int
    mark: str
    label: str
    amount: int


@dataclass
class IncomeStatement:
    """損益計算書"""

    lines: List[StatementLine]
    year: Optional[int] = None

    @property
    def values(self) -> Dict[int, int]:
        return {line.number: line.amount for line in self.lines}

    def amount(self, number: int) -> int:
        return self.values[number]

    @property
    def revenue(self) -> int:
        return self.amount(1)

    @property
    def cost_of_sales(self) -> int:
        return self.amount(6)

    @property
    def gross_profit(self) -> int:
        return self.amount(7)

    @property
    def total_expenses(self) -> int:
        return self.amount(32)

    @property
    def income_before_deduction(self) -> int:
        return self.amount(43)

    @property
    def taxable_income(self) -> int:
        return self.amount(45)

    def to_dict(self) -> Dict:
        return {
            "year": self.year,
            "lines": [
                {"number": l.number, "mark": l.mark, "label": l.label, "amount": l.amount}
                for l in self.lines
            ],
            "revenue": self.revenue,
            "gross_profit": self.gross_profit,
            "total_expenses": self.total_expenses,
            "income_before_deduction": self.income_before_deduction,
            "taxable_income": self.taxable_income,
        }


def balances_by_name(accounts: Iterable[Any], balances: Dict[Any, int]) -> Dict[str, int]:
    return {a.name: balances.get(a.id, 0) for a in accounts}


def evaluate_slot(slot: TemplateSlot, by_name: Dict[str, int], values: Dict[int, int]) -> int:
    kind = slot.kind
    if isinstance(kind, Constant):
        return kind.value
    if isinstance(kind, Lookup):
        return sum(by_name.get(name, 0) for name in kind.account_names)
    if isinstance(kind, Formula):
        return sum(values[n] for n in kind.plus) - sum(values[n] for n in kind.minus)
    raise TypeError(f"Unknown slot kind: {kind!r}")


def compose_income_statement(
    accounts: Iterable[Any],
    balances: Dict[Any, int],
    template: Optional[List[TemplateSlot]] = None,
    year: Optional[int] = None,
) -> IncomeStatement:
    """
    損益計算書を組み立てる
    ユーザーの科目表にない科目は0として扱う
    """
    by_name = balances_by_name(accounts, balances)
    values: Dict[int, int] = {}
    lines = []
    for slot in template or INCOME_STATEMENT_TEMPLATE:
        values[slot.number] = evaluate_slot(slot, by_name, values)
        lines.append(StatementLine(slot.number, slot.mark, slot.label, values[slot.number]))
    return IncomeStatement(lines=lines, year=year)


@dataclass
class BalanceSheetSection:
    account_type: AccountType
    lines: List[Dict] = field(default_factory=list)
    total: int = 0

    @property
    def label(self) -> str:
        return ACCOUNT_TYPE_LABELS[self.account_type]


@dataclass
class BalanceSheet:
    """貸借対照表"""

    assets: BalanceSheetSection
    liabilities: BalanceSheetSection
    equity: BalanceSheetSection
    net_income: int
    year: Optional[int] = None

    @property
    def total_assets(self) -> int:
        return self.assets.total

    @property
    def total_liabilities(self) -> int:
        return self.liabilities.total

    @property
    def total_equity(self) -> int:
        """純資産合計（当期純利益を含む）"""
        return self.equity.total + self.net_income

    @property
    def total_liabilities_and_equity(self) -> int:
        return self.total_liabilities + self.total_equity

    @property
    def difference(self) -> int:
        return self.total_assets - self.total_liabilities_and_equity

    @property
    def is_balanced(self) -> bool:
        return self.difference == 0

    def to_dict(self) -> Dict:
        def section(s: BalanceSheetSection) -> Dict:
            return {"label": s.label, "accounts": s.lines, "total": s.total}

        return {
            "year": self.year,
            "assets": section(self.assets),
            "liabilities": section(self.liabilities),
            "equity": section(self.equity),
            "net_income": self.net_income,
            "total_assets": self.total_assets,
            "total_liabilities": self.total_liabilities,
            "total_equity": self.total_equity,
            "total_liabilities_and_equity": self.total_liabilities_and_equity,
            "is_balanced": self.is_balanced,
            "difference": self.difference,
        }


def compose_balance_sheet(
    accounts: Iterable[Any],
    balances: Dict[Any, int],
    year: Optional[int] = None,
) -> BalanceSheet:
    """
    貸借対照表を組み立てる
    貸借が一致しない場合も数値はそのまま返し、is_balanced で知らせる
    """
    accounts = sort_accounts(accounts)
    sections = {
        t: BalanceSheetSection(account_type=t)
        for t in (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)
    }
    for account in accounts:
        section = sections.get(to_account_type(account.type))
        if section is None:
            continue
        amount = balances.get(account.id, 0)
        section.lines.append({"account_id": str(account.id), "name": account.name, "amount": amount})
        section.total += amount

    sheet = BalanceSheet(
        assets=sections[AccountType.ASSET],
        liabilities=sections[AccountType.LIABILITY],
        equity=sections[AccountType.EQUITY],
        net_income=net_income(accounts, balances),
        year=year,
    )
    if not sheet.is_balanced:
        logger.warning(
            f"Balance sheet mismatch (year={year}): assets={sheet.total_assets}, "
            f"liabilities+equity={sheet.total_liabilities_and_equity}, difference={sheet.difference}"
        )
    return sheet


class FinancialStatementGenerator:
    """決算書生成エンジン"""

    def generate_income_statement(self, db: Session, user_id: str, year: int) -> IncomeStatement:
        accounts, balances = balance_engine.compute_year_balances(db, user_id, year)
        return compose_income_statement(accounts, balances, year=year)

    def generate_balance_sheet(self, db: Session, user_id: str, year: int) -> BalanceSheet:
        accounts, balances = balance_engine.compute_year_balances(db, user_id, year)
        return compose_balance_sheet(accounts, balances, year=year)

    def generate(self, db: Session, user_id: str, year: int) -> Dict:
        """損益計算書と貸借対照表をまとめて生成"""
        accounts, balances = balance_engine.compute_year_balances(db, user_id, year)
        return {
            "income_statement": compose_income_statement(accounts, balances, year=year),
            "balance_sheet": compose_balance_sheet(accounts, balances, year=year),
        }


financial_statement_generator = FinancialStatementGenerator()
