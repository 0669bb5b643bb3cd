"""
Order Service - リクエスト検証 (ステージ 1)

顧客の存在と、要求された全商品がカタログに存在することを確認する。
読み取りのみで副作用はない。
"""

import logging
from typing import Sequence

from .errors import CustomerNotFound, NoProductsResolved, OrderFailure, ProductsNotFound
from .models import OrderLineRequest, ValidatedContext
from .ports import CustomerDirectory, ProductCatalog

logger = logging.getLogger(__name__)


def _unique_ids(lines: Sequence[OrderLineRequest]) -> list[str]:
    return list(dict.fromkeys(line.id for line in lines))


async def validate(
    customers: CustomerDirectory,
    products: ProductCatalog,
    customer_id: str,
    lines: Sequence[OrderLineRequest],
) -> ValidatedContext | OrderFailure:
    customer = await customers.find_by_id(customer_id)
    if customer is None:
        return CustomerNotFound(customer_id=customer_id)

    requested_ids = _unique_ids(lines)
    snapshot = await products.find_all_by_id(lines)
    if not snapshot:
        return NoProductsResolved(product_ids=requested_ids)

    found_ids = {product.id for product in snapshot}
    # 最初の 1 件で止めず、不足している ID をすべて集める
    missing = [pid for pid in requested_ids if pid not in found_ids]
    if missing:
        return ProductsNotFound(product_ids=missing)

    logger.debug("Validated order request: customer=%s products=%s", customer_id, requested_ids)
    return ValidatedContext(customer=customer, products=snapshot)
