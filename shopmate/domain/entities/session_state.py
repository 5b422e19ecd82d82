from __future__ import annotations

from dataclasses import dataclass

from shopmate.domain.entities.conversation import ConversationTurn
from shopmate.domain.entities.product import Product


@dataclass(frozen=True)
class SessionState:
    token: str
    active_product: Product | None = None
    collecting_customer_info: bool = False
    order_placed: bool = False
    history: tuple[ConversationTurn, ...] = ()
    order_key: str | None = None  # idempotency key for the active product's order
    created_at: float | None = None
    updated_at: float | None = None
