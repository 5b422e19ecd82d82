from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from shopmate.application.exceptions import (
    DuplicateOrderError,
    LLMContractError,
    ProductNotFoundError,
)
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.ports.llm import LLMPort
from shopmate.application.ports.order_store import OrderStorePort
from shopmate.domain.entities.order import CUSTOMER_FIELDS, Order, button_details, raw_details


@dataclass
class CreateOrderUseCase:
    llm: LLMPort
    catalog: CatalogPort
    orders: OrderStorePort

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        product_id: str | None,
        customer_details_text: str | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        product_id = (product_id or "").strip()
        if not product_id:
            raise ValueError("Product ID is required.")

        key = (idempotency_key or "").strip() or None
        if key:
            existing = self.orders.find_by_idempotency_key(key)
            if existing is not None:
                raise DuplicateOrderError(existing)

        if self.catalog.get_product(product_id) is None:
            raise ProductNotFoundError(f"Product {product_id} does not exist.")

        text = (customer_details_text or "").strip()
        details = self._extract_details(text) if text else button_details()

        order = self.orders.create(product_id=product_id, customer_details=details, idempotency_key=key)
        self._logger.info(
            "Order created",
            extra={"order_id": order.id, "product_id": product_id, "source": details.get("source", "parsed")},
        )
        return order

    def _extract_details(self, text: str) -> dict[str, Any]:
        try:
            raw = self.llm.extract_customer_details(text)
            return parse_customer_details(raw)
        except LLMContractError as e:
            self._logger.warning("Customer details not parsed; storing raw text", extra={"reason": str(e)})
            return raw_details(text)


def parse_customer_details(raw: str) -> dict[str, Any]:
    """Parse the extraction output into {name, address, phone}; anything else is a contract error."""
    cleaned = re.sub(r"```(?:json)?\s*|\s*```", "", raw or "").strip()
    try:
        data = json.loads(cleaned)
    except Exception:
        snippet = cleaned[:200].replace("\n", " ")
        raise LLMContractError(f"Customer details: invalid JSON. Snippet: {snippet!r}")
    if not isinstance(data, dict):
        raise LLMContractError("Customer details: expected a JSON object.")

    details: dict[str, Any] = {}
    for field in CUSTOMER_FIELDS:
        value = data.get(field)
        if isinstance(value, str):
            value = value.strip() or None
            if value and value.lower() in {"null", "none", "n/a"}:
                value = None
        details[field] = value
    return details
