"""
Order Service - 設定

環境変数から読み込む。未設定の項目はデフォルト値を使う。
REDIS_URL が未設定ならイベント発行は無効、
CUSTOMER_SERVICE_URL が設定されていれば顧客は HTTP で問い合わせる。
"""

import os

from pydantic import BaseModel


class Settings(BaseModel):
    database_url: str = "sqlite+aiosqlite:///./orders.db"
    redis_url: str | None = None
    order_events_channel: str = "order_events"
    customer_service_url: str | None = None
    http_timeout: float = 10.0
    sql_echo: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


def load_settings() -> Settings:
    env = {
        "database_url": os.environ.get("DATABASE_URL"),
        "redis_url": os.environ.get("REDIS_URL"),
        "order_events_channel": os.environ.get("ORDER_EVENTS_CHANNEL"),
        "customer_service_url": os.environ.get("CUSTOMER_SERVICE_URL"),
        "http_timeout": os.environ.get("HTTP_TIMEOUT"),
        "sql_echo": os.environ.get("SQL_ECHO"),
        "log_level": os.environ.get("LOG_LEVEL"),
        "host": os.environ.get("HOST"),
        "port": os.environ.get("PORT"),
    }
    return Settings(**{k: v for k, v in env.items() if v})
