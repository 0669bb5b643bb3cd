"""
Order Service - コマンドハンドラ (CQRS の Write 側)

注文作成ワークフロー:

    Received → Validated → Priced → Committed   (成功)
                  │           │          │
                  └───────────┴──────────┴────▶ Failed(reason)

各ステージは前のステージの出力に依存するため、必ず順番に実行する。
検証・在庫の失敗は値として返し、インフラ層の例外はそのまま送出する。
リトライはしない。
"""

import logging

from .committer import commit
from .errors import OrderFailure, is_failure
from .models import CreateOrderRequest, Order
from .ports import CustomerDirectory, EventPublisher, OrderStore, ProductCatalog
from .pricing import resolve
from .publisher import publish_outcome
from .validation import validate

logger = logging.getLogger(__name__)


class CreateOrderService:
    """
    注文作成サービス

    コラボレーターはコンストラクタで明示的に受け取る。
    publisher を渡した場合は、結果に応じて OrderCreated / OrderRejected を発行する。
    """

    def __init__(
        self,
        customers: CustomerDirectory,
        products: ProductCatalog,
        orders: OrderStore,
        publisher: EventPublisher | None = None,
    ) -> None:
        self.customers = customers
        self.products = products
        self.orders = orders
        self.publisher = publisher

    async def execute(self, request: CreateOrderRequest) -> Order | OrderFailure:
        result = await self._run(request)

        if is_failure(result):
            logger.warning(
                "Order rejected: customer=%s reason=%s", request.customer_id, result.kind
            )
        else:
            logger.info(
                "Order created: id=%s customer=%s lines=%d",
                result.id,
                result.customer.id,
                len(result.lines),
            )

        if self.publisher is not None:
            await publish_outcome(self.publisher, request, result)
        return result

    async def _run(self, request: CreateOrderRequest) -> Order | OrderFailure:
        # ── Step 1: 検証 ─────────────────────────────
        context = await validate(
            self.customers, self.products, request.customer_id, request.products
        )
        if is_failure(context):
            return context

        # ── Step 2: 価格決定と在庫チェック ──────────
        priced = resolve(request.products, context.products)
        if is_failure(priced):
            return priced

        # ── Step 3: 注文確定と在庫減算 ──────────────
        return await commit(self.orders, self.products, context.customer, priced)
