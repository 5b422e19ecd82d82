from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shopmate.domain.entities.order import Order


class LLMUpstreamError(RuntimeError):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass


class CatalogError(RuntimeError):
    """Raised when the product catalog cannot be queried."""
    pass


class OrderStoreError(RuntimeError):
    """Raised when an order cannot be persisted or read back."""
    pass


class ProductNotFoundError(LookupError):
    pass


class SessionNotFoundError(LookupError):
    """Raised for unknown or expired session tokens."""
    pass


class DuplicateOrderError(RuntimeError):
    """Raised when an order with the same idempotency key already exists."""

    def __init__(self, order: "Order") -> None:
        super().__init__(f"Order already placed for this request (order {order.id}).")
        self.order = order
