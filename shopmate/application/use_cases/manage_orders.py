from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from shopmate.application.exceptions import CatalogError
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.ports.order_store import OrderStorePort
from shopmate.domain.entities.order import Order, OrderStatus


@dataclass
class ManageOrdersUseCase:
    """Operator view over orders: listing with product info and status updates."""

    orders: OrderStorePort
    catalog: CatalogPort

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def list_with_products(self) -> list[tuple[Order, Any]]:
        orders = self.orders.list_orders()
        products: dict[str, Any] = {}
        for order in orders:
            if order.product_id in products:
                continue
            try:
                products[order.product_id] = self.catalog.get_product(order.product_id)
            except CatalogError as e:
                self._logger.warning("Product lookup failed", extra={"product_id": order.product_id, "reason": str(e)})
                products[order.product_id] = None
        return [(order, products.get(order.product_id)) for order in orders]

    def update_status(self, order_id: str, status: str | OrderStatus) -> Order | None:
        try:
            new_status = OrderStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValueError(f"Invalid status {status!r}; expected one of: {allowed}")

        order = self.orders.update_status(order_id, new_status)
        if order is not None:
            self._logger.info("Order status updated", extra={"order_id": order_id, "status": new_status.value})
        return order
