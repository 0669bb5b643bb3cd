"""
Order Service - コラボレーターのインターフェース

ワークフローが依存するのはこの 3 つ(+ 任意の EventPublisher)だけ。
実装は repositories.py (SQLAlchemy), memory.py (インメモリ),
customers_http.py (HTTP) にある。
"""

from typing import Protocol, Sequence

from pydantic import BaseModel

from .models import Customer, Order, OrderLine, OrderLineRequest, Product, StockShortfall, StockUpdate


class CustomerDirectory(Protocol):
    async def find_by_id(self, customer_id: str) -> Customer | None: ...


class ProductCatalog(Protocol):
    async def find_all_by_id(self, lines: Sequence[OrderLineRequest]) -> list[Product]:
        """存在する商品だけを返す。lines の quantity は参照しない。"""
        ...

    async def decrement_stock(self, updates: Sequence[StockUpdate]) -> list[StockShortfall]:
        """
        条件付き在庫減算 (quantity >= decrement のときだけ減らす)。

        1 件でも不足があればバッチ全体を適用せず、
        現在の在庫から計算した不足分を返す。
        """
        ...


class OrderStore(Protocol):
    async def create(self, customer: Customer, lines: Sequence[OrderLine]) -> Order:
        """ヘッダと明細をまとめて保存し、ID とタイムスタンプを採番する。"""
        ...

    async def delete(self, order_id: str) -> None:
        """補償トランザクション用"""
        ...


class EventPublisher(Protocol):
    async def publish(self, event: BaseModel) -> None: ...
