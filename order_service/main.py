"""
Order Service - FastAPI エントリーポイント

CQRS パターンに従い、Command (POST) と Query (GET) のエンドポイントを分離。

POST /commands/orders の処理:
  1. 1 つの AsyncSession 上で注文作成ワークフローを実行
  2. 成功なら commit、失敗なら rollback
  3. commit 後に Redis Pub/Sub でイベントを発行（他サービスへ通知）
"""

import logging
from contextlib import asynccontextmanager

import httpx
import redis.asyncio as aioredis
import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from . import queries
from .commands import CreateOrderService
from .config import Settings, load_settings
from .customers_http import HttpCustomerDirectory
from .errors import is_failure
from .models import CreateOrderRequest, Order, OrderLineRequest
from .publisher import RedisEventPublisher, publish_outcome
from .repositories import SqlCustomerDirectory, SqlOrderStore, SqlProductCatalog
from .tables import create_schema

logger = logging.getLogger(__name__)

FAILURE_STATUS = {
    "customer_not_found": 404,
    "no_products_resolved": 404,
    "products_not_found": 404,
    "insufficient_stock": 409,
}

router = APIRouter()


# ── Request Models ───────────────────────────────

class PlaceOrderRequest(BaseModel):
    customer_id: str = Field(min_length=1)
    products: list[OrderLineRequest] = Field(min_length=1)


def _order_response(order: Order) -> dict:
    body = order.model_dump(mode="json")
    body["total_price"] = str(order.total)
    return body


# ── Command Endpoints (Write 側) ─────────────────

@router.post("/commands/orders", status_code=201)
async def cmd_create_order(req: PlaceOrderRequest, request: Request):
    """注文作成コマンド"""
    state = request.app.state
    command = CreateOrderRequest(customer_id=req.customer_id, products=req.products)

    async with state.async_session() as session:
        if state.http_client is not None:
            customers = HttpCustomerDirectory(state.http_client, state.settings.customer_service_url)
        else:
            customers = SqlCustomerDirectory(session)
        service = CreateOrderService(
            customers=customers,
            products=SqlProductCatalog(session),
            orders=SqlOrderStore(session),
        )
        result = await service.execute(command)
        if is_failure(result):
            await session.rollback()
        else:
            await session.commit()

    if state.publisher is not None:
        await publish_outcome(state.publisher, command, result)

    if is_failure(result):
        detail = result.model_dump(mode="json")
        detail["message"] = result.message
        raise HTTPException(status_code=FAILURE_STATUS[result.kind], detail=detail)
    return _order_response(result)


# ── Query Endpoints (Read 側) ────────────────────

@router.get("/queries/orders")
async def query_list_orders(request: Request, customer_id: str | None = None):
    """注文一覧を取得"""
    async with request.app.state.async_session() as session:
        return await queries.list_orders(session, customer_id)


@router.get("/queries/orders/{order_id}")
async def query_get_order(order_id: str, request: Request):
    """指定注文を取得"""
    async with request.app.state.async_session() as session:
        order = await queries.get_order(session, order_id)
        if not order:
            raise HTTPException(404, "Order not found")
        return order


@router.get("/queries/products/{product_id}")
async def query_get_product(product_id: str, request: Request):
    """指定商品を取得"""
    async with request.app.state.async_session() as session:
        product = await queries.get_product(session, product_id)
        if not product:
            raise HTTPException(404, "Product not found")
        return product


@router.get("/health")
async def health():
    return {"status": "ok", "service": "order-service"}


def create_app(settings: Settings | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = settings or load_settings()
        logging.basicConfig(level=cfg.log_level)

        engine = create_async_engine(cfg.database_url, echo=cfg.sql_echo)
        await create_schema(engine)

        app.state.settings = cfg
        app.state.async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        app.state.http_client = (
            httpx.AsyncClient(timeout=cfg.http_timeout) if cfg.customer_service_url else None
        )
        redis_pool = aioredis.from_url(cfg.redis_url, decode_responses=True) if cfg.redis_url else None
        app.state.publisher = (
            RedisEventPublisher(redis_pool, cfg.order_events_channel) if redis_pool is not None else None
        )
        logger.info("Order Service started (database=%s)", engine.url.render_as_string())

        yield

        if redis_pool is not None:
            await redis_pool.aclose()
        if app.state.http_client is not None:
            await app.state.http_client.aclose()
        await engine.dispose()

    app = FastAPI(title="Order Service", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """uvicorn でサービスを起動する (`order-service` コマンド)"""
    settings = load_settings()
    uvicorn.run("order_service.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
