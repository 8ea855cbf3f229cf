"""
データベース接続とセッション管理
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from aoiro.config import settings

# SQLiteはスレッドをまたいで接続を使うため
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# エンジン作成
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_recycle=300,
    connect_args=connect_args,
)

# セッションファクトリ
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ベースクラス
Base = declarative_base()


def get_db():
    """データベースセッションの依存性注入"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
