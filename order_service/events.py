"""
Order Service - イベント定義

注文ワークフローの結果として発行するイベント。
イベントは過去形で命名し、不変(immutable)として扱う。
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class OrderLineData(BaseModel):
    product_id: str
    quantity: int
    price: Decimal


class OrderCreated(BaseModel):
    """注文が作成され、在庫が減算された"""
    order_id: str
    customer_id: str
    lines: list[OrderLineData]
    total_price: Decimal
    timestamp: datetime


class OrderRejected(BaseModel):
    """注文が受け付けられなかった"""
    customer_id: str
    reason: str
    detail: dict
    timestamp: datetime
