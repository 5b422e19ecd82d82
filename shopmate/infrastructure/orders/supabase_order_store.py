from __future__ import annotations

from datetime import datetime
from typing import Any

from shopmate.application.exceptions import DuplicateOrderError, OrderStoreError
from shopmate.application.ports.order_store import OrderStorePort
from shopmate.domain.entities.order import Order, OrderStatus
from shopmate.infrastructure.supabase.rest_client import SupabaseRestClient, SupabaseRestError

ORDERS_TABLE = "orders"
# PostgREST answers 409 when a unique index (orders.idempotency_key) rejects the row.
UNIQUE_VIOLATION_STATUS = 409


class SupabaseOrderStore(OrderStorePort):
    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    def create(
        self,
        product_id: str,
        customer_details: dict[str, Any],
        idempotency_key: str | None = None,
    ) -> Order:
        row: dict[str, Any] = {"product_id": product_id, "customer_details": customer_details}
        if idempotency_key:
            row["idempotency_key"] = idempotency_key
        try:
            return _to_order(self._client.insert(ORDERS_TABLE, row))
        except SupabaseRestError as e:
            if idempotency_key and e.status == UNIQUE_VIOLATION_STATUS:
                existing = self.find_by_idempotency_key(idempotency_key)
                if existing is not None:
                    raise DuplicateOrderError(existing) from e
            raise OrderStoreError("Failed to create order in database") from e

    def find_by_idempotency_key(self, key: str) -> Order | None:
        rows = self._select({"select": "*", "idempotency_key": f"eq.{key}", "limit": "1"})
        return rows[0] if rows else None

    def get(self, order_id: str) -> Order | None:
        rows = self._select({"select": "*", "id": f"eq.{order_id}", "limit": "1"})
        return rows[0] if rows else None

    def list_orders(self) -> list[Order]:
        return self._select({"select": "*", "order": "created_at.desc"})

    def update_status(self, order_id: str, status: OrderStatus) -> Order | None:
        try:
            rows = self._client.update(ORDERS_TABLE, {"id": f"eq.{order_id}"}, {"status": status.value})
        except SupabaseRestError as e:
            raise OrderStoreError(str(e)) from e
        return _to_order(rows[0]) if rows else None

    def _select(self, params: dict[str, str]) -> list[Order]:
        try:
            rows = self._client.select(ORDERS_TABLE, params)
        except SupabaseRestError as e:
            raise OrderStoreError(str(e)) from e
        return [_to_order(row) for row in rows]


def _to_order(row: dict[str, Any]) -> Order:
    try:
        status = OrderStatus(row.get("status") or OrderStatus.pending.value)
    except ValueError:
        status = OrderStatus.pending
    return Order(
        id=str(row["id"]),
        product_id=str(row.get("product_id") or ""),
        customer_details=dict(row.get("customer_details") or {}),
        status=status,
        idempotency_key=row.get("idempotency_key"),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_timestamp(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None
