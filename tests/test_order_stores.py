"""
Tests for order stores and the Supabase adapters, against an in-process PostgREST stand-in.
"""

from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from shopmate.application.exceptions import DuplicateOrderError, OrderStoreError
from shopmate.application.use_cases.create_order import CreateOrderUseCase
from shopmate.infrastructure.catalog.supabase_catalog import SupabaseCatalog
from shopmate.infrastructure.orders.supabase_order_store import SupabaseOrderStore
from shopmate.infrastructure.supabase.rest_client import SupabaseRestClient

ORDER_ROW = {
    "id": 17,
    "product_id": "p-1",
    "customer_details": {"source": "button"},
    "status": "pending",
    "idempotency_key": "key-1",
    "created_at": "2024-05-01T10:00:00Z",
}


def _client(handler) -> SupabaseRestClient:
    return SupabaseRestClient("https://example.supabase.co", "service-key", transport=httpx.MockTransport(handler))


def test_memory_store_rejects_repeated_key(orders):
    first = orders.create(product_id="p-1", customer_details={"source": "button"}, idempotency_key="K")

    with pytest.raises(DuplicateOrderError) as exc:
        orders.create(product_id="p-1", customer_details={"name": "John"}, idempotency_key="K")

    assert exc.value.order.id == first.id
    assert len(orders.list_orders()) == 1


def test_memory_store_allows_orders_without_key(orders):
    orders.create(product_id="p-1", customer_details={"source": "button"})
    orders.create(product_id="p-1", customer_details={"source": "button"})

    assert len(orders.list_orders()) == 2


def test_concurrent_submissions_create_one_order(llm, catalog, orders, navy):
    use_case = CreateOrderUseCase(llm=llm, catalog=catalog, orders=orders)
    start = threading.Barrier(8)
    outcomes: list[str] = []

    def submit() -> None:
        start.wait()
        try:
            use_case.execute(product_id=navy.id, idempotency_key="double-click")
            outcomes.append("created")
        except DuplicateOrderError:
            outcomes.append("duplicate")

    with ThreadPoolExecutor(max_workers=8) as pool:
        for _ in range(8):
            pool.submit(submit)

    assert outcomes.count("created") == 1
    assert outcomes.count("duplicate") == 7
    assert len(orders.list_orders()) == 1


def test_supabase_unique_violation_is_duplicate():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(409, json={"code": "23505", "message": "duplicate key value"})
        assert request.url.params["idempotency_key"] == "eq.key-1"
        return httpx.Response(200, json=[ORDER_ROW])

    store = SupabaseOrderStore(_client(handler))

    with pytest.raises(DuplicateOrderError) as exc:
        store.create(product_id="p-1", customer_details={"source": "button"}, idempotency_key="key-1")

    assert exc.value.order.id == "17"


def test_supabase_insert_failure_is_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    store = SupabaseOrderStore(_client(handler))

    with pytest.raises(OrderStoreError):
        store.create(product_id="p-1", customer_details={"source": "button"}, idempotency_key="key-1")


def test_supabase_create_sends_row():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        assert request.headers["Prefer"] == "return=representation"
        return httpx.Response(201, json=[ORDER_ROW])

    order = SupabaseOrderStore(_client(handler)).create(
        product_id="p-1", customer_details={"source": "button"}, idempotency_key="key-1"
    )

    assert order.id == "17"
    assert order.created_at is not None
    assert seen == [[{"product_id": "p-1", "customer_details": {"source": "button"}, "idempotency_key": "key-1"}]]


def test_supabase_catalog_matches_through_rpc():
    seen: list[tuple[str, dict]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(
            200,
            json=[{"id": 3, "product_name": "Leather Chelsea Boots", "product_code": "BOOT-BR", "price": 4800, "stock_quantity": 8, "similarity": 0.91}],
        )

    products = SupabaseCatalog(_client(handler)).match_by_embedding([0.1, 0.2], threshold=0.8, count=1)

    assert [p.code for p in products] == ["BOOT-BR"]
    assert seen == [
        ("/rest/v1/rpc/match_products", {"query_embedding": [0.1, 0.2], "match_threshold": 0.8, "match_count": 1})
    ]
