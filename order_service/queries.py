"""
Order Service - クエリハンドラ (CQRS の Read 側)

注文と商品の読み取り。書き込み側 (commands.py) とは独立しており、
状態を変更しない。
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .tables import order_lines, orders, products


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite はタイムゾーンを保持しないので UTC として扱う
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _line_to_dict(row) -> dict:
    return {
        "product_id": row.product_id,
        "quantity": row.quantity,
        "price": str(row.price),
    }


def _order_to_dict(row, lines: list) -> dict:
    total = sum((line.price * line.quantity for line in lines), 0)
    return {
        "id": row.id,
        "customer_id": row.customer_id,
        "lines": [_line_to_dict(line) for line in lines],
        "total_price": str(total),
        "created_at": _isoformat(row.created_at),
        "updated_at": _isoformat(row.updated_at),
    }


async def _load_lines(session: AsyncSession, order_ids: list[str]) -> dict[str, list]:
    if not order_ids:
        return {}
    result = await session.execute(
        select(order_lines)
        .where(order_lines.c.order_id.in_(order_ids))
        .order_by(order_lines.c.order_id, order_lines.c.position)
    )
    grouped: dict[str, list] = {order_id: [] for order_id in order_ids}
    for row in result.fetchall():
        grouped[row.order_id].append(row)
    return grouped


async def get_order(session: AsyncSession, order_id: str) -> dict | None:
    """注文 1 件を明細付きで取得する。"""
    result = await session.execute(select(orders).where(orders.c.id == order_id))
    row = result.fetchone()
    if not row:
        return None
    lines = await _load_lines(session, [row.id])
    return _order_to_dict(row, lines[row.id])


async def list_orders(session: AsyncSession, customer_id: str | None = None) -> list[dict]:
    """注文一覧を新しい順に取得する。customer_id で絞り込める。"""
    stmt = select(orders).order_by(orders.c.created_at.desc())
    if customer_id is not None:
        stmt = stmt.where(orders.c.customer_id == customer_id)
    result = await session.execute(stmt)
    rows = result.fetchall()
    lines = await _load_lines(session, [row.id for row in rows])
    return [_order_to_dict(row, lines[row.id]) for row in rows]


async def get_product(session: AsyncSession, product_id: str) -> dict | None:
    result = await session.execute(select(products).where(products.c.id == product_id))
    row = result.fetchone()
    if not row:
        return None
    return {
        "id": row.id,
        "name": row.name,
        "price": str(row.price),
        "quantity": row.quantity,
        "updated_at": _isoformat(row.updated_at),
    }
