"""
FastAPIアプリケーションのエントリーポイント
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from aoiro.api import (
    accounts,
    closing,
    fixed_assets,
    health,
    journals,
    ledger,
    opening_balances,
    reports,
    statements,
)
from aoiro.api.exception_handlers import setup_exception_handlers
from aoiro.models.database import engine, Base
from aoiro.config import settings

# ログ設定
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """アプリケーションのライフサイクル管理"""
    # 起動時
    logger.info(f"Starting {settings.APP_NAME}...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
    yield
    # 終了時
    logger.info(f"Shutting down {settings.APP_NAME}...")


app = FastAPI(
    title=settings.APP_NAME,
    description="個人事業主向けの青色申告（複式簿記）会計API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# ルーター登録
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(accounts.router, prefix="/accounts", tags=["勘定科目"])
app.include_router(journals.router, prefix="/journals", tags=["仕訳"])
app.include_router(opening_balances.router, prefix="/opening-balances", tags=["期首残高"])
app.include_router(fixed_assets.router, prefix="/fixed-assets", tags=["固定資産"])
app.include_router(statements.router, prefix="/statements", tags=["決算書"])
app.include_router(ledger.router, prefix="/ledger", tags=["帳簿"])
app.include_router(reports.router, prefix="/reports", tags=["集計"])
app.include_router(closing.router, prefix="/yearly-closing", tags=["年次繰越"])


@app.get("/")
def root():
    """ルートエンドポイント"""
    return {
        "message": f"{settings.APP_NAME} APIサーバー稼働中",
        "version": "1.0.0",
        "docs": "/docs",
    }
