"""
Order Service - 注文確定 (ステージ 3)

1. 注文(ヘッダ + 明細)を保存する
2. 在庫を条件付きで減算する
   ├─ 成功 → 注文を返す
   └─ 不足 (並行注文に在庫を取られた) → 注文を削除して InsufficientStock
      (補償トランザクション)

在庫減算が例外で失敗した場合も注文を削除してから例外をそのまま送出する。
SQL 実装では両方とも同じセッションのトランザクション内で実行される。
"""

import logging

from .errors import InsufficientStock
from .models import Customer, Order, PricedOrder
from .ports import OrderStore, ProductCatalog

logger = logging.getLogger(__name__)


async def commit(
    orders: OrderStore,
    products: ProductCatalog,
    customer: Customer,
    priced: PricedOrder,
) -> Order | InsufficientStock:
    # 注文作成 → 在庫減算 の順序を守る
    order = await orders.create(customer, priced.lines)

    try:
        shortfalls = await products.decrement_stock(priced.stock_updates)
    except Exception:
        logger.exception("Stock update failed, compensating order %s", order.id)
        await orders.delete(order.id)
        raise

    if shortfalls:
        logger.warning(
            "Stock changed concurrently, compensating order %s: %s",
            order.id,
            [s.product_id for s in shortfalls],
        )
        await orders.delete(order.id)
        return InsufficientStock(entries=shortfalls)

    return order
