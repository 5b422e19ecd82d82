from __future__ import annotations

import logging
from dataclasses import dataclass

from shopmate.application.ports.llm import LLMPort
from shopmate.domain.entities.chat_reply import ChatIntent, ChatReply
from shopmate.domain.entities.conversation import ConversationTurn, Role
from shopmate.domain.entities.product import Product

COLLECT_INFO_MARKER = "[INTENT:COLLECT_INFO]"


@dataclass
class ConverseUseCase:
    llm: LLMPort
    assistant_name: str = "ShopMate"
    language: str = "Bengali (Bangla)"
    tone: str = "Warm, respectful, highly professional."
    currency: str = "BDT"

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        active_product: Product | None,
        history: list[ConversationTurn],
        user_message: str,
    ) -> ChatReply:
        message = (user_message or "").strip()
        if not message:
            raise ValueError("User message is required.")

        instruction = self.build_instruction(active_product)
        prior = [turn for turn in history or [] if turn.role in (Role.user, Role.assistant)]

        raw = self.llm.chat(
            system_instruction=instruction,
            preamble=self.preamble(),
            history=prior,
            user_message=message,
        )
        reply = parse_reply(raw)
        if reply.intent is not None:
            self._logger.info("Purchase intent detected", extra={"intent": reply.intent.value})
        return reply

    def preamble(self) -> str:
        return f"Hi, I'm {self.assistant_name}. How can I help you today?"

    def build_instruction(self, product: Product | None) -> str:
        base = (
            f"You are '{self.assistant_name}', a friendly, polite and helpful customer support agent "
            "for an online store.\n"
            "\n"
            "*** PERSONALITY RULES ***\n"
            f"1. Language: always respond in {self.language}.\n"
            f"2. Tone: {self.tone}\n"
            "3. Keep answers short and about the store's products.\n"
            "\n"
            "*** INTENT DETECTION RULE ***\n"
            "If the user clearly wants to buy or place an order, ask for their full name, complete "
            "shipping address and phone number. Then append this exact token to the very end of "
            f"your response: {COLLECT_INFO_MARKER}\n"
            "Never use the token in any other situation.\n"
        )
        if product is None:
            context = "The user has not selected a specific product yet. Answer their general questions politely."
        else:
            context = (
                "You are currently discussing this product:\n"
                f"  - Name: {product.name}\n"
                f"  - Price: {_format_price(product.price)} {self.currency}\n"
                f"  - In Stock: {product.stock} units"
            )
        return f"{base}\n{context}"


def parse_reply(raw: str) -> ChatReply:
    """Turn raw model text into a tagged reply; the collect-info marker never reaches the caller."""
    text = raw or ""
    if COLLECT_INFO_MARKER not in text:
        return ChatReply(reply=text.strip())
    cleaned = text.replace(COLLECT_INFO_MARKER, "").strip()
    return ChatReply(reply=cleaned, intent=ChatIntent.COLLECT_INFO)


def _format_price(price: float) -> str:
    if float(price).is_integer():
        return f"{int(price):,}"
    return f"{price:,.2f}"
