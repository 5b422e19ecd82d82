from __future__ import annotations

import logging
import secrets
import time
from dataclasses import replace

from shopmate.application.exceptions import (
    CatalogError,
    DuplicateOrderError,
    LLMContractError,
    LLMUpstreamError,
    OrderStoreError,
    ProductNotFoundError,
    SessionNotFoundError,
)
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.ports.session_store import SessionStorePort
from shopmate.application.use_cases.converse import ConverseUseCase
from shopmate.application.use_cases.create_order import CreateOrderUseCase
from shopmate.application.use_cases.match_product import MatchProductUseCase
from shopmate.domain.entities.chat_reply import ChatIntent
from shopmate.domain.entities.conversation import ConversationTurn, Role
from shopmate.domain.entities.product import Product
from shopmate.domain.entities.session_state import SessionState

GREETING = "Hello! Upload an image of a product or ask me anything."
IMAGE_PLACEHOLDER = "[image]"

# Failures of a single external-call sequence; they end the turn but never the session.
TURN_ERRORS = (LLMUpstreamError, LLMContractError, CatalogError, OrderStoreError, ProductNotFoundError, ValueError)


class SessionControllerUseCase:
    """
    Server-owned shopping session.

    Holds the active product, the collecting-customer-info flag, the
    order-placed flag and the chat history, and routes each user action to
    the matcher, the conversation manager or the order recorder.

    Invariants after every operation:
    - collecting_customer_info implies active_product is set
    - history only grows, in chronological order
    """

    def __init__(
        self,
        store: SessionStorePort,
        catalog: CatalogPort,
        match_product: MatchProductUseCase,
        converse: ConverseUseCase,
        create_order: CreateOrderUseCase,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._match_product = match_product
        self._converse = converse
        self._create_order = create_order
        self._logger = logging.getLogger(__name__)

    def start(self, token: str | None = None) -> SessionState:
        now = time.time()
        state = SessionState(
            token=token or secrets.token_urlsafe(24),
            history=(ConversationTurn(Role.assistant, GREETING),),
            created_at=now,
            updated_at=now,
        )
        self._store.save(state)
        self._logger.info("Session started", extra={"session": _short(state.token)})
        return state

    def get_or_start(self, token: str) -> SessionState:
        """Resume `token`, or start a session under that token (used for messenger senders)."""
        try:
            return self.resume(token)
        except SessionNotFoundError:
            return self.start(token)

    def resume(self, token: str) -> SessionState:
        state = self._load(token)
        product = state.active_product
        if product is None:
            return state

        current = self._catalog.get_product(product.id)
        if current is None:
            state = replace(
                state,
                active_product=None,
                collecting_customer_info=False,
                order_placed=False,
                order_key=None,
            )
            state = _append(state, Role.system, f"The product '{product.name}' is no longer available.")
            self._logger.info("Active product vanished on resume", extra={"session": _short(token), "product_id": product.id})
            return self._save(state)

        if current != product:
            state = self._save(replace(state, active_product=current))
        return state

    def upload_image(self, token: str, image: bytes, mime_type: str) -> SessionState:
        state = _append(self._load(token), Role.user, IMAGE_PLACEHOLDER)

        try:
            result = self._match_product.execute(image, mime_type)
        except TURN_ERRORS as e:
            self._logger.warning("Image analysis failed", extra={"session": _short(token), "reason": str(e)})
            return self._save(_append(state, Role.assistant, f"Error: {e}"))

        if result.product is None:
            state = replace(state, active_product=None, collecting_customer_info=False, order_key=None)
            return self._save(_append(state, Role.assistant, result.reason or "Sorry, I couldn't identify the product."))

        state = replace(
            state,
            active_product=result.product,
            collecting_customer_info=False,
            order_placed=False,
            order_key=secrets.token_urlsafe(16),
        )
        self._logger.info("Product matched", extra={"session": _short(token), "product_id": result.product.id})
        return self._save(_append(state, Role.assistant, render_product(result.product, self._converse.currency)))

    def send_message(self, token: str, text: str) -> SessionState:
        message = (text or "").strip()
        if not message:
            raise ValueError("Message text is required.")

        state = _append(self._load(token), Role.user, message)

        if state.collecting_customer_info:
            if state.active_product is None:
                state = replace(state, collecting_customer_info=False)
                return self._save(_append(state, Role.system, "Error: No active product to order."))
            return self._save(self._record_order(state, state.active_product, details_text=message))

        prior = list(state.history[:-1])
        try:
            reply = self._converse.execute(state.active_product, prior, message)
        except TURN_ERRORS as e:
            self._logger.warning("Chat failed", extra={"session": _short(token), "reason": str(e)})
            return self._save(_append(state, Role.assistant, f"Error: {e}"))

        state = _append(state, Role.assistant, reply.reply)
        if reply.intent is ChatIntent.COLLECT_INFO and state.active_product is not None:
            # A placed order keeps its key; the details start a new order.
            key = secrets.token_urlsafe(16) if state.order_placed else state.order_key
            state = replace(state, collecting_customer_info=True, order_key=key)
        return self._save(state)

    def place_order(self, token: str) -> SessionState:
        state = self._load(token)
        if state.active_product is None:
            return self._save(_append(state, Role.system, "Error: No active product to order."))
        if state.order_placed:
            return self._save(_append(state, Role.system, "This order has already been placed."))
        return self._save(self._record_order(state, state.active_product, details_text=None))

    def reset(self, token: str) -> None:
        self._store.delete(token)
        self._logger.info("Session reset", extra={"session": _short(token)})

    def _record_order(self, state: SessionState, product: Product, details_text: str | None) -> SessionState:
        try:
            order = self._create_order.execute(
                product_id=product.id,
                customer_details_text=details_text,
                idempotency_key=state.order_key,
            )
        except DuplicateOrderError as e:
            self._logger.info("Duplicate order submission", extra={"session": _short(state.token), "order_id": e.order.id})
            state = replace(state, order_placed=True, collecting_customer_info=False)
            return _append(state, Role.system, f"This order has already been placed. Order ID: {e.order.id}")
        except TURN_ERRORS as e:
            self._logger.warning("Order failed", extra={"session": _short(state.token), "reason": str(e)})
            return _append(state, Role.system, f"Error: {e}")

        state = replace(state, order_placed=True, collecting_customer_info=False)
        return _append(state, Role.system, f"Order placed successfully! Order ID: {order.id}")

    def _load(self, token: str) -> SessionState:
        state = self._store.get(token) if token else None
        if state is None:
            raise SessionNotFoundError("Session not found or expired.")
        return state

    def _save(self, state: SessionState) -> SessionState:
        state = replace(state, updated_at=time.time())
        self._store.save(state)
        return state


def render_product(product: Product, currency: str) -> str:
    return f"{product.name}\nPrice: {currency} {product.price:,.0f}\nIn Stock: {product.stock} units"


def _append(state: SessionState, role: Role, text: str) -> SessionState:
    return replace(state, history=state.history + (ConversationTurn(role, text),))


def _short(token: str) -> str:
    return token[:8]
