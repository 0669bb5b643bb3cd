"""
Order Service - イベント発行 (Redis Pub/Sub)

注文結果を order_events チャネルに発行し、他サービスへ通知する。

注意: Redis Pub/Sub は fire-and-forget 方式。
発行に失敗しても注文自体はすでに確定しているため、ログに残して処理を続ける。
"""

import json
import logging
from datetime import datetime, timezone

import redis.asyncio as aioredis
from pydantic import BaseModel

from .errors import OrderFailure, is_failure
from .events import OrderCreated, OrderLineData, OrderRejected
from .models import CreateOrderRequest, Order
from .ports import EventPublisher

logger = logging.getLogger(__name__)


class RedisEventPublisher:
    def __init__(self, redis: aioredis.Redis, channel: str = "order_events") -> None:
        self.redis = redis
        self.channel = channel

    async def publish(self, event: BaseModel) -> None:
        await self.redis.publish(
            self.channel,
            json.dumps(
                {
                    "event_type": type(event).__name__,
                    "data": event.model_dump(mode="json"),
                },
                default=str,
            ),
        )


def build_event(request: CreateOrderRequest, result: Order | OrderFailure) -> BaseModel:
    now = datetime.now(timezone.utc)
    if is_failure(result):
        return OrderRejected(
            customer_id=request.customer_id,
            reason=result.kind,
            detail=result.model_dump(mode="json"),
            timestamp=now,
        )
    return OrderCreated(
        order_id=result.id,
        customer_id=result.customer.id,
        lines=[
            OrderLineData(product_id=line.product_id, quantity=line.quantity, price=line.price)
            for line in result.lines
        ],
        total_price=result.total,
        timestamp=now,
    )


async def publish_outcome(
    publisher: EventPublisher,
    request: CreateOrderRequest,
    result: Order | OrderFailure,
) -> None:
    event = build_event(request, result)
    try:
        await publisher.publish(event)
    except Exception:
        logger.exception("Failed to publish %s", type(event).__name__)
