from __future__ import annotations

import hashlib
import json

from shopmate.application.ports.llm import LLMPort
from shopmate.domain.entities.conversation import ConversationTurn
from shopmate.domain.entities.product import Product

BUY_WORDS = ("order", "buy", "purchase", "অর্ডার", "কিনব")


class MockLLM(LLMPort):
    """Deterministic stand-in used when no OpenAI key is configured."""

    def __init__(self, keywords: str = "polo shirt, navy, cotton, casual, short sleeve") -> None:
        self._keywords = keywords

    def extract_keywords(self, image: bytes, mime_type: str) -> str:
        return self._keywords

    def classify_category(self, image: bytes, mime_type: str) -> str:
        first = self._keywords.split(",")[0].strip()
        return json.dumps({"category": first or None})

    def pick_best_match(self, image: bytes, mime_type: str, candidates: list[Product]) -> str:
        return candidates[0].code if candidates else ""

    def chat(
        self,
        system_instruction: str,
        preamble: str,
        history: list[ConversationTurn],
        user_message: str,
    ) -> str:
        normalized = user_message.lower()
        if any(word in normalized for word in BUY_WORDS):
            return (
                "Of course! To confirm your order, please share your name, full address "
                "and phone number.[INTENT:COLLECT_INFO]"
            )
        return f"Mock reply to: {user_message}"

    def extract_customer_details(self, text: str) -> str:
        parts = [p.strip() for p in text.split(",") if p.strip()]
        name = parts[0] if parts else None
        phone = parts[-1] if len(parts) >= 3 else None
        address = ", ".join(parts[1:-1]) if len(parts) >= 3 else (parts[1] if len(parts) == 2 else None)
        return json.dumps({"name": name, "address": address, "phone": phone})

    def describe_image(self, image_url: str, product_name: str) -> str:
        return f"Photo of {product_name}."

    def describe_upload(self, image: bytes, mime_type: str) -> str:
        return f"Photo of {self._keywords}."

    def embed(self, text: str) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [digest[i % len(digest)] / 255.0 for i in range(1536)]
