"""
Order Service - 失敗の分類

検証・在庫チェックの失敗は例外ではなく値として返す。
呼び出し側は kind で分岐でき、不足している ID などの構造化データを
そのままユーザー向けメッセージに使える。

ProductNotFound だけは例外: 検証後には起こりえない内部契約違反を表す。
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from .models import StockShortfall


class CustomerNotFound(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["customer_not_found"] = "customer_not_found"
    customer_id: str

    @property
    def message(self) -> str:
        return f"Customer not found: {self.customer_id}"


class NoProductsResolved(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["no_products_resolved"] = "no_products_resolved"
    product_ids: list[str]

    @property
    def message(self) -> str:
        return "Could not find any product with the given ids"


class ProductsNotFound(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["products_not_found"] = "products_not_found"
    product_ids: list[str]

    @property
    def message(self) -> str:
        return f"Could not find products: {', '.join(self.product_ids)}"


class InsufficientStock(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["insufficient_stock"] = "insufficient_stock"
    entries: list[StockShortfall]

    @property
    def message(self) -> str:
        ids = ", ".join(f"(id: {e.product_id})" for e in self.entries)
        return f"The available quantity is less than requested: {ids}"


OrderFailure = Union[CustomerNotFound, NoProductsResolved, ProductsNotFound, InsufficientStock]

FAILURE_TYPES = (CustomerNotFound, NoProductsResolved, ProductsNotFound, InsufficientStock)


def is_failure(result: object) -> bool:
    return isinstance(result, FAILURE_TYPES)


class OrderServiceError(Exception):
    """Order Service 内部のエラー基底クラス"""


class ProductNotFound(OrderServiceError):
    """スナップショットに存在しない商品を参照した（内部契約違反）"""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id
