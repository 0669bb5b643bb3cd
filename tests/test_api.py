import httpx
import pytest
from fastapi.testclient import TestClient

from order_service import main
from order_service.config import Settings
from order_service.events import OrderCreated, OrderRejected
from order_service.main import create_app

from .conftest import RecordingPublisher, seed_database


@pytest.fixture
def client(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"
    seed_database(url)
    with TestClient(create_app(Settings(database_url=url))) as client:
        yield client


def _place(client, customer_id="C-1", **quantities):
    return client.post(
        "/commands/orders",
        json={
            "customer_id": customer_id,
            "products": [{"id": pid, "quantity": qty} for pid, qty in quantities.items()],
        },
    )


def test_health_endpoint_returns_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "order-service"}


def test_create_order_happy_path(client):
    r = _place(client, A=3)

    assert r.status_code == 201
    body = r.json()
    assert body["customer"]["id"] == "C-1"
    assert body["lines"] == [{"product_id": "A", "quantity": 3, "price": "10.00"}]
    assert body["total_price"] == "30.00"

    assert client.get("/queries/products/A").json()["quantity"] == 2
    stored = client.get(f"/queries/orders/{body['id']}").json()
    assert stored["lines"] == [{"product_id": "A", "quantity": 3, "price": "10.00"}]


def test_insufficient_stock_returns_409(client):
    r = _place(client, A=6)

    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["kind"] == "insufficient_stock"
    assert detail["entries"] == [{"product_id": "A", "resulting_quantity": -1}]
    assert client.get("/queries/products/A").json()["quantity"] == 5
    assert client.get("/queries/orders").json() == []


def test_unknown_customer_returns_404(client):
    r = _place(client, customer_id="ghost", A=1)

    assert r.status_code == 404
    assert r.json()["detail"]["kind"] == "customer_not_found"
    assert r.json()["detail"]["message"] == "Customer not found: ghost"


def test_unknown_products_are_listed(client):
    r = _place(client, A=1, X=1, Y=1)

    assert r.status_code == 404
    assert r.json()["detail"]["product_ids"] == ["X", "Y"]


def test_caller_price_is_ignored(client):
    r = client.post(
        "/commands/orders",
        json={"customer_id": "C-1", "products": [{"id": "B", "quantity": 2, "price": 0}]},
    )

    assert r.status_code == 201
    assert r.json()["lines"][0]["price"] == "2.50"


def test_invalid_requests_return_422(client):
    assert client.post("/commands/orders", json={"customer_id": "C-1", "products": []}).status_code == 422
    assert _place(client, A=0).status_code == 422


def test_second_identical_order_fails(client):
    assert _place(client, B=10).status_code == 201
    r = _place(client, B=10)

    assert r.status_code == 409
    assert r.json()["detail"]["entries"] == [{"product_id": "B", "resulting_quantity": -10}]
    assert len(client.get("/queries/orders", params={"customer_id": "C-1"}).json()) == 1


def test_events_published_after_commit(client):
    publisher = RecordingPublisher()
    client.app.state.publisher = publisher

    _place(client, A=1)
    _place(client, A=10)

    assert [type(e) for e in publisher.events] == [OrderCreated, OrderRejected]


def test_unknown_order_returns_404(client):
    assert client.get("/queries/orders/does-not-exist").status_code == 404
    assert client.get("/queries/products/does-not-exist").status_code == 404


def test_order_query_returns_utc_timestamps(client):
    order_id = _place(client, A=1).json()["id"]

    stored = client.get(f"/queries/orders/{order_id}").json()

    assert stored["created_at"].endswith("+00:00")
    assert stored["updated_at"].endswith("+00:00")


def _remote_customers(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/queries/customers/R-7":
        return httpx.Response(200, json={"id": "R-7", "name": "Remy"})
    return httpx.Response(404, json={"detail": "Customer not found"})


@pytest.fixture
def remote_client(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"
    seed_database(url)
    settings = Settings(database_url=url, customer_service_url="http://customers.local")
    with TestClient(create_app(settings)) as client:
        client.app.state.http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(_remote_customers)
        )
        yield client


def test_customers_resolved_by_customer_service(remote_client):
    r = _place(remote_client, customer_id="R-7", A=2)

    assert r.status_code == 201
    assert r.json()["customer"] == {"id": "R-7", "name": "Remy", "email": None}
    assert remote_client.get("/queries/products/A").json()["quantity"] == 3


def test_local_customers_ignored_when_customer_service_configured(remote_client):
    r = _place(remote_client, customer_id="C-1", A=1)

    assert r.status_code == 404
    assert r.json()["detail"]["kind"] == "customer_not_found"


def test_run_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.run()

    assert calls == [("order_service.main:app", {"host": "127.0.0.1", "port": 9001})]
