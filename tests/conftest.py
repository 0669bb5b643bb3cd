import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from order_service.memory import InMemoryCustomerDirectory, InMemoryOrderStore, InMemoryProductCatalog
from order_service.models import Customer, Product
from order_service.tables import create_schema, customers, products

CUSTOMER = Customer(id="C-1", name="Carol", email="carol@example.com")
PRODUCT_A = Product(id="A", name="Alpha", price=Decimal("10.00"), quantity=5)
PRODUCT_B = Product(id="B", name="Beta", price=Decimal("2.50"), quantity=10)


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    async def publish(self, event) -> None:
        self.events.append(event)


async def seed_catalog(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.execute(insert(customers), [CUSTOMER.model_dump()])
        await conn.execute(
            insert(products),
            [p.model_dump() for p in (PRODUCT_A, PRODUCT_B)],
        )


def seed_database(url: str) -> None:
    async def _seed():
        engine = create_async_engine(url)
        await create_schema(engine)
        await seed_catalog(engine)
        await engine.dispose()

    asyncio.run(_seed())


@pytest.fixture
def customer_directory():
    return InMemoryCustomerDirectory([CUSTOMER])


@pytest.fixture
def catalog():
    return InMemoryProductCatalog([PRODUCT_A, PRODUCT_B])


@pytest.fixture
def order_store():
    return InMemoryOrderStore()


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    await create_schema(engine)
    await seed_catalog(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session
