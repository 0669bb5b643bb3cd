"""
Order Service - 価格決定と在庫チェック (ステージ 2)

価格は常にカタログのスナップショットから取る。呼び出し側が信用されるのは数量だけ。

同じ商品 ID が複数行に現れた場合は、出現順を保ったまま数量を合算して 1 行にまとめ、
合算後の数量で在庫をチェックする。

純粋関数: 渡されたスナップショット以外は読まない。
"""

from typing import Sequence

from .errors import InsufficientStock, ProductNotFound
from .models import OrderLine, OrderLineRequest, PricedOrder, Product, StockShortfall, StockUpdate


def merge_lines(lines: Sequence[OrderLineRequest]) -> dict[str, int]:
    """商品 ID ごとに数量を合算する（dict は挿入順を保つ）。"""
    merged: dict[str, int] = {}
    for line in lines:
        merged[line.id] = merged.get(line.id, 0) + line.quantity
    return merged


def find_product(product_id: str, snapshot: Sequence[Product]) -> Product:
    for product in snapshot:
        if product.id == product_id:
            return product
    raise ProductNotFound(product_id)


def resolve(
    lines: Sequence[OrderLineRequest],
    snapshot: Sequence[Product],
) -> PricedOrder | InsufficientStock:
    priced: list[OrderLine] = []
    updates: list[tuple[str, int, int]] = []
    shortfalls: list[StockShortfall] = []

    for product_id, quantity in merge_lines(lines).items():
        product = find_product(product_id, snapshot)
        priced.append(OrderLine(product_id=product_id, quantity=quantity, price=product.price))

        resulting = product.quantity - quantity
        if resulting < 0:
            shortfalls.append(StockShortfall(product_id=product_id, resulting_quantity=resulting))
        else:
            updates.append((product_id, resulting, quantity))

    if shortfalls:
        return InsufficientStock(entries=shortfalls)

    return PricedOrder(
        lines=priced,
        stock_updates=[
            StockUpdate(product_id=pid, quantity=resulting, decrement=decrement)
            for pid, resulting, decrement in updates
        ],
    )
