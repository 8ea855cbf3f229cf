"""
アプリケーション設定を管理
環境変数から設定を読み込む
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """アプリケーション設定"""

    # データベース
    DATABASE_URL: str = "postgresql://postgres:password@db:5432/aoiro_db"

    # 認証・年度コンテキスト
    USER_ID_HEADER: str = "X-User-Id"
    YEAR_COOKIE: str = "selectedYear"

    # 初回利用時にデフォルト勘定科目を作成するか
    AUTO_PROVISION_ACCOUNTS: bool = True

    # アプリケーション
    APP_NAME: str = "青色申告会計"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
