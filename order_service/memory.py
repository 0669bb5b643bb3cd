"""
Order Service - インメモリ実装

テストやローカル実行用のコラボレーター。
在庫のチェックと減算の間に await を挟まないので、
同じイベントループ上の並行注文は直列化される。
"""

from datetime import datetime, timezone
from typing import Iterable, Sequence
from uuid import uuid4

from .models import Customer, Order, OrderLine, OrderLineRequest, Product, StockShortfall, StockUpdate


class InMemoryCustomerDirectory:
    def __init__(self, customers: Iterable[Customer] = ()) -> None:
        self._customers = {c.id: c for c in customers}

    def add(self, customer: Customer) -> None:
        self._customers[customer.id] = customer

    async def find_by_id(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)


class InMemoryProductCatalog:
    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products = {p.id: p for p in products}

    def add(self, product: Product) -> None:
        self._products[product.id] = product

    def get(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    async def find_all_by_id(self, lines: Sequence[OrderLineRequest]) -> list[Product]:
        ids = dict.fromkeys(line.id for line in lines)
        return [self._products[pid] for pid in ids if pid in self._products]

    async def decrement_stock(self, updates: Sequence[StockUpdate]) -> list[StockShortfall]:
        shortfalls = []
        for stock in updates:
            current = self._products.get(stock.product_id)
            available = current.quantity if current else 0
            if available < stock.decrement:
                shortfalls.append(
                    StockShortfall(
                        product_id=stock.product_id,
                        resulting_quantity=available - stock.decrement,
                    )
                )
        if shortfalls:
            return shortfalls

        for stock in updates:
            current = self._products[stock.product_id]
            self._products[stock.product_id] = current.model_copy(
                update={"quantity": current.quantity - stock.decrement}
            )
        return []


class InMemoryOrderStore:
    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}

    async def create(self, customer: Customer, lines: Sequence[OrderLine]) -> Order:
        now = datetime.now(timezone.utc)
        order = Order(
            id=str(uuid4()),
            customer=customer,
            lines=list(lines),
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        return order

    async def delete(self, order_id: str) -> None:
        self.orders.pop(order_id, None)
