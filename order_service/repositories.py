"""
Order Service - SQLAlchemy リポジトリ

ports.py のインターフェースを AsyncSession で実装する。
3 つのリポジトリは同じセッションを共有し、commit / rollback は呼び出し側
(main.py のエンドポイント) が行う。これにより注文作成と在庫減算が
1 つのトランザクションに収まる。
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Customer, Order, OrderLine, OrderLineRequest, Product, StockShortfall, StockUpdate
from .tables import customers, order_lines, orders, products


class SqlCustomerDirectory:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, customer_id: str) -> Customer | None:
        result = await self.session.execute(
            select(customers).where(customers.c.id == customer_id)
        )
        row = result.fetchone()
        if not row:
            return None
        return Customer(id=row.id, name=row.name, email=row.email)


class SqlProductCatalog:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_all_by_id(self, lines: Sequence[OrderLineRequest]) -> list[Product]:
        ids = list(dict.fromkeys(line.id for line in lines))
        if not ids:
            return []
        result = await self.session.execute(
            select(products).where(products.c.id.in_(ids))
        )
        return [
            Product(id=row.id, name=row.name, price=row.price, quantity=row.quantity)
            for row in result.fetchall()
        ]

    async def decrement_stock(self, updates: Sequence[StockUpdate]) -> list[StockShortfall]:
        """
        在庫の条件付き減算

        UPDATE ... WHERE quantity >= :decrement は行ロックの下で評価されるため、
        同じ商品への並行注文は直列化され、負けた側は 0 行更新になる。
        不足が 1 件でもあれば、このバッチで適用済みの減算を戻す。

        行ロックは常に商品 ID 順に取る（逆順で取り合うとデッドロックする）。
        """
        now = datetime.now(timezone.utc)
        applied: list[StockUpdate] = []
        shortfalls: list[StockShortfall] = []

        for stock in sorted(updates, key=lambda u: u.product_id):
            result = await self.session.execute(
                update(products)
                .where(products.c.id == stock.product_id)
                .where(products.c.quantity >= stock.decrement)
                .values(quantity=products.c.quantity - stock.decrement, updated_at=now)
            )
            if result.rowcount == 1:
                applied.append(stock)
                continue

            # 負けた側: 勝者の反映後の在庫で不足数を計算する
            current = await self.session.scalar(
                select(products.c.quantity).where(products.c.id == stock.product_id)
            )
            shortfalls.append(
                StockShortfall(
                    product_id=stock.product_id,
                    resulting_quantity=(current or 0) - stock.decrement,
                )
            )

        if shortfalls:
            for stock in applied:
                await self.session.execute(
                    update(products)
                    .where(products.c.id == stock.product_id)
                    .values(quantity=products.c.quantity + stock.decrement, updated_at=now)
                )
        return shortfalls


class SqlOrderStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, customer: Customer, lines: Sequence[OrderLine]) -> Order:
        order_id = str(uuid4())
        now = datetime.now(timezone.utc)

        await self.session.execute(
            insert(orders).values(
                id=order_id, customer_id=customer.id, created_at=now, updated_at=now
            )
        )
        await self.session.execute(
            insert(order_lines),
            [
                {
                    "order_id": order_id,
                    "position": position,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "price": line.price,
                }
                for position, line in enumerate(lines)
            ],
        )

        return Order(
            id=order_id,
            customer=customer,
            lines=list(lines),
            created_at=now,
            updated_at=now,
        )

    async def delete(self, order_id: str) -> None:
        await self.session.execute(delete(order_lines).where(order_lines.c.order_id == order_id))
        await self.session.execute(delete(orders).where(orders.c.id == order_id))
