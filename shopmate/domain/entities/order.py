from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OrderStatus(str, Enum):
    pending = "pending"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


BUTTON_SOURCE = "button"
RAW_SOURCE = "raw"
CUSTOMER_FIELDS = ("name", "address", "phone")


def button_details() -> dict[str, Any]:
    """Details record stored when the order was placed without any customer text."""
    return {"source": BUTTON_SOURCE}


def raw_details(text: str) -> dict[str, Any]:
    return {"source": RAW_SOURCE, "raw": text}


@dataclass(frozen=True)
class Order:
    id: str
    product_id: str
    customer_details: dict[str, Any] = field(default_factory=button_details)
    status: OrderStatus = OrderStatus.pending
    idempotency_key: str | None = None
    created_at: float | None = None
