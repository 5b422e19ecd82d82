from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from shopmate.domain.entities.order import Order, OrderStatus


class OrderStorePort(ABC):
    @abstractmethod
    def create(
        self,
        product_id: str,
        customer_details: dict[str, Any],
        idempotency_key: str | None = None,
    ) -> Order:
        """
        Insert one order row and return it with its generated id.

        Raises:
            DuplicateOrderError: an order with `idempotency_key` already exists.
                The check and the insert are atomic.
        """
        raise NotImplementedError

    @abstractmethod
    def find_by_idempotency_key(self, key: str) -> Order | None:
        raise NotImplementedError

    @abstractmethod
    def get(self, order_id: str) -> Order | None:
        raise NotImplementedError

    @abstractmethod
    def list_orders(self) -> list[Order]:
        """All orders, newest first."""
        raise NotImplementedError

    @abstractmethod
    def update_status(self, order_id: str, status: OrderStatus) -> Order | None:
        raise NotImplementedError
