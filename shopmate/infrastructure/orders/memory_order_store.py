from __future__ import annotations

import threading
import time
import uuid
from dataclasses import replace
from typing import Any

from shopmate.application.exceptions import DuplicateOrderError
from shopmate.application.ports.order_store import OrderStorePort
from shopmate.domain.entities.order import Order, OrderStatus


class MemoryOrderStore(OrderStorePort):
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._by_key: dict[str, str] = {}
        self._lock = threading.Lock()

    def create(
        self,
        product_id: str,
        customer_details: dict[str, Any],
        idempotency_key: str | None = None,
    ) -> Order:
        with self._lock:
            if idempotency_key and idempotency_key in self._by_key:
                raise DuplicateOrderError(self._orders[self._by_key[idempotency_key]])
            order = Order(
                id=str(uuid.uuid4()),
                product_id=product_id,
                customer_details=dict(customer_details),
                idempotency_key=idempotency_key,
                created_at=time.time(),
            )
            self._orders[order.id] = order
            if idempotency_key:
                self._by_key[idempotency_key] = order.id
            return order

    def find_by_idempotency_key(self, key: str) -> Order | None:
        with self._lock:
            order_id = self._by_key.get(key)
            return self._orders.get(order_id) if order_id else None

    def get(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    def list_orders(self) -> list[Order]:
        # Insertion order is creation order.
        return list(reversed(list(self._orders.values())))

    def update_status(self, order_id: str, status: OrderStatus) -> Order | None:
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            updated = replace(order, status=status)
            self._orders[order_id] = updated
            return updated
