"""
Order Service - 顧客ディレクトリ (HTTP)

顧客情報を別サービス (Customer Service) から取得する実装。
CUSTOMER_SERVICE_URL が設定されているときに使う。

    GET {base_url}/queries/customers/{customer_id}
      200 → Customer
      404 → 存在しない (None)
      その他 → httpx.HTTPStatusError をそのまま送出
"""

import httpx

from .models import Customer


class HttpCustomerDirectory:
    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def find_by_id(self, customer_id: str) -> Customer | None:
        resp = await self.client.get(f"{self.base_url}/queries/customers/{customer_id}")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return Customer.model_validate(resp.json())
