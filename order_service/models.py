"""
Order Service - ドメインモデル

価格と数量はカタログ(Product)が正。呼び出し側は商品 ID と数量のみを渡し、
価格は注文時点のカタログ価格で確定する。確定した OrderLine は不変。
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    email: str | None = None


class Product(BaseModel):
    """カタログのスナップショット 1 件"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    price: Decimal = Field(ge=0, decimal_places=2)
    quantity: int = Field(ge=0)


class OrderLineRequest(BaseModel):
    """呼び出し側が指定する注文明細。価格フィールドは持たない。"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    quantity: int = Field(gt=0)


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    customer_id: str
    products: list[OrderLineRequest]


class OrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    customer: Customer
    lines: list[OrderLine]
    created_at: datetime
    updated_at: datetime

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))


class StockUpdate(BaseModel):
    """
    在庫更新 1 件

    quantity: スナップショットから算出した注文後の在庫数
    decrement: 実際に減算する数量（条件付き減算に使う）
    """
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(ge=0)
    decrement: int = Field(gt=0)


class StockShortfall(BaseModel):
    """在庫不足 1 件。resulting_quantity は負の値になる。"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    resulting_quantity: int


class ValidatedContext(BaseModel):
    """検証ステージの出力: 顧客とカタログのスナップショット"""
    model_config = ConfigDict(frozen=True)

    customer: Customer
    products: list[Product]


class PricedOrder(BaseModel):
    """価格決定ステージの出力"""
    model_config = ConfigDict(frozen=True)

    lines: list[OrderLine]
    stock_updates: list[StockUpdate]
