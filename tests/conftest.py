"""
pytest共通設定
"""

import os

# アプリのエンジンがPostgreSQLに接続しないようにする
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from aoiro.models.database import Base, get_db
from aoiro.main import app
from aoiro.core.account_registry import account_registry
from aoiro.core.accounting_engine import accounting_engine


# テスト用インメモリデータベース
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_USER_ID = "test_user_123"
OTHER_USER_ID = "other_user_456"


@pytest.fixture(scope="function")
def db_session():
    """テスト用DBセッション"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """テスト用FastAPIクライアント（ログイン済み・2024年度を選択）"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        test_client.headers.update({"X-User-Id": TEST_USER_ID})
        test_client.cookies.set("selectedYear", "2024")
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return TEST_USER_ID


@pytest.fixture
def accounts(db_session, user_id):
    """デフォルト勘定科目（科目名 -> Account）"""
    account_registry.ensure_default_accounts(db_session, user_id)
    return {a.name: a for a in account_registry.list_accounts(db_session, user_id)}


def make_journal(db, user_id, accounts, journal_date, description, debits, credits):
    """
    仕訳作成ヘルパー
    debits / credits は (科目名, 金額) のリスト
    """
    entries = [
        {"account_id": str(accounts[name].id), "amount": amount, "is_debit": True}
        for name, amount in debits
    ] + [
        {"account_id": str(accounts[name].id), "amount": amount, "is_debit": False}
        for name, amount in credits
    ]
    return accounting_engine.create_journal_entry(
        db,
        user_id,
        {"date": journal_date.isoformat(), "description": description, "entries": entries},
    )


@pytest.fixture
def sample_journals(db_session, user_id, accounts):
    """2024年度のサンプル仕訳"""
    return [
        make_journal(
            db_session, user_id, accounts, date(2024, 1, 15),
            "A社 売上", [("普通預金", 500000)], [("売上高", 500000)],
        ),
        make_journal(
            db_session, user_id, accounts, date(2024, 2, 25),
            "大家さん", [("地代家賃", 120000)], [("普通預金", 120000)],
        ),
        make_journal(
            db_session, user_id, accounts, date(2024, 3, 10),
            "携帯電話代", [("通信費", 30000)], [("現金", 30000)],
        ),
        make_journal(
            db_session, user_id, accounts, date(2024, 3, 20),
            "商品仕入", [("仕入高", 100000)], [("買掛金", 100000)],
        ),
    ]


@pytest.fixture
def journal_factory(db_session, user_id, accounts):
    """make_journal をログインユーザー・デフォルト科目で呼ぶ"""
    def factory(journal_date, description, debits, credits):
        return make_journal(db_session, user_id, accounts, journal_date, description, debits, credits)

    return factory
