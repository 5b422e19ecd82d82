from __future__ import annotations

import base64
import binascii
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from shopmate.domain.entities.conversation import ConversationTurn
from shopmate.domain.entities.order import Order, OrderStatus
from shopmate.domain.entities.product import Product
from shopmate.domain.entities.session_state import SessionState


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ProductSchema(CamelModel):
    id: str
    name: str
    code: str = ""
    price: float = 0
    stock: int = 0
    image_url: str | None = Field(default=None, alias="imageUrl")
    category: str | None = None
    tags: list[str] = Field(default_factory=list)

    @staticmethod
    def from_entity(product: Product) -> "ProductSchema":
        return ProductSchema(
            id=product.id,
            name=product.name,
            code=product.code,
            price=product.price,
            stock=product.stock,
            image_url=product.image_url,
            category=product.category,
            tags=list(product.tags),
        )

    def to_entity(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            code=self.code,
            price=self.price,
            stock=self.stock,
            image_url=self.image_url,
            category=self.category,
            tags=tuple(t.strip().lower() for t in self.tags if t and t.strip()),
        )


class ImageRequestSchema(CamelModel):
    image_base64: str = Field(default="", alias="imageBase64")
    image_mime: str = Field(default="image/jpeg", alias="imageMime")

    def decode(self) -> tuple[bytes, str]:
        """Decode the payload, accepting a `data:<mime>;base64,` URL prefix."""
        raw = (self.image_base64 or "").strip()
        mime = (self.image_mime or "").strip() or "image/jpeg"
        if raw.startswith("data:") and "," in raw:
            header, raw = raw.split(",", 1)
            header_mime = header[5:].split(";", 1)[0]
            if header_mime:
                mime = header_mime
        if not raw:
            raise ValueError("Missing imageBase64 field")
        try:
            image = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("imageBase64 is not valid base64")
        if not image:
            raise ValueError("Image data is empty.")
        return image, mime


class AnalyzeImageResponseSchema(CamelModel):
    found_product: ProductSchema | None = Field(default=None, alias="foundProduct")
    message: str | None = None


class ChatPartSchema(BaseModel):
    text: str = ""


class ChatMessageSchema(BaseModel):
    role: str = "user"
    text: str | None = None
    parts: list[ChatPartSchema] | None = None

    def to_turn(self) -> ConversationTurn:
        text = self.text if self.text is not None else "".join(p.text for p in self.parts or [])
        return ConversationTurn.from_payload(self.role, text)


class ChatRequestSchema(CamelModel):
    product_context: ProductSchema | None = Field(default=None, alias="productContext")
    chat_history: list[ChatMessageSchema] = Field(default_factory=list, alias="chatHistory")
    user_message: str = Field(default="", alias="userMessage")


class ChatResponseSchema(BaseModel):
    reply: str
    intent: str | None = None


class CreateOrderRequestSchema(CamelModel):
    product_id: str | None = Field(default=None, alias="productId")
    customer_details_text: str | None = Field(default=None, alias="customerDetailsText")
    idempotency_key: str | None = Field(default=None, alias="idempotencyKey")


class CreateOrderResponseSchema(CamelModel):
    success: bool
    order_id: str | None = Field(default=None, alias="orderId")
    error: str | None = None


class TurnSchema(BaseModel):
    role: str
    text: str


class SessionSchema(CamelModel):
    token: str
    active_product: ProductSchema | None = Field(default=None, alias="activeProduct")
    collecting_customer_info: bool = Field(default=False, alias="collectingCustomerInfo")
    order_placed: bool = Field(default=False, alias="orderPlaced")
    history: list[TurnSchema] = Field(default_factory=list)

    @staticmethod
    def from_state(state: SessionState) -> "SessionSchema":
        return SessionSchema(
            token=state.token,
            active_product=ProductSchema.from_entity(state.active_product) if state.active_product else None,
            collecting_customer_info=state.collecting_customer_info,
            order_placed=state.order_placed,
            history=[TurnSchema(role=t.role.value, text=t.text) for t in state.history],
        )


class SendMessageSchema(BaseModel):
    text: str = ""


class OrderSchema(CamelModel):
    id: str
    product_id: str = Field(alias="productId")
    customer_details: dict[str, Any] = Field(default_factory=dict, alias="customerDetails")
    status: OrderStatus = OrderStatus.pending
    created_at: float | None = Field(default=None, alias="createdAt")
    product: ProductSchema | None = None

    @staticmethod
    def from_entity(order: Order, product: Product | None = None) -> "OrderSchema":
        return OrderSchema(
            id=order.id,
            product_id=order.product_id,
            customer_details=dict(order.customer_details),
            status=order.status,
            created_at=order.created_at,
            product=ProductSchema.from_entity(product) if product else None,
        )


class OrderStatusUpdateSchema(BaseModel):
    status: str
