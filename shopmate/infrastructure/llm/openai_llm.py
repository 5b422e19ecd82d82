from __future__ import annotations

import base64
from typing import Any

from shopmate.application.exceptions import LLMContractError, LLMUpstreamError
from shopmate.application.ports.llm import LLMPort
from shopmate.core.config import settings
from shopmate.domain.entities.conversation import ConversationTurn, Role
from shopmate.domain.entities.product import Product
from shopmate.infrastructure.llm.openai_client import OpenAIClientHolder, openai_client
from shopmate.infrastructure.llm.prompts import (
    build_category_prompt,
    build_customer_details_prompt,
    build_description_prompt,
    build_disambiguation_prompt,
    build_keywords_prompt,
)

EMBEDDING_DIMENSIONS = 1536


class OpenAILLM(LLMPort):
    """
    OpenAI-backed adapter implementing LLMPort.

    Contract guarantees:
    - every text method returns the model's raw, stripped text
    - Raises:
        LLMUpstreamError: networking/provider failures
        LLMContractError: empty response or wrong embedding shape
    """

    def __init__(self, holder: OpenAIClientHolder | None = None) -> None:
        self._holder = holder or openai_client

    def extract_keywords(self, image: bytes, mime_type: str) -> str:
        return self._call_vision(build_keywords_prompt(), image, mime_type, allow_empty=True)

    def classify_category(self, image: bytes, mime_type: str) -> str:
        return self._call_vision(build_category_prompt(), image, mime_type, use_json_mode=True)

    def pick_best_match(self, image: bytes, mime_type: str, candidates: list[Product]) -> str:
        return self._call_vision(build_disambiguation_prompt(candidates), image, mime_type)

    def chat(
        self,
        system_instruction: str,
        preamble: str,
        history: list[ConversationTurn],
        user_message: str,
    ) -> str:
        messages: list[dict[str, Any]] = [{"role": "system", "content": system_instruction}]
        if preamble:
            messages.append({"role": "assistant", "content": preamble})
        for turn in history:
            if turn.role is Role.system:
                continue
            messages.append({"role": turn.role.value, "content": turn.text})
        messages.append({"role": "user", "content": user_message})

        return self._call(
            model=settings.OPENAI_MODEL_CHAT,
            messages=messages,
            temperature=settings.OPENAI_TEMPERATURE_CHAT,
        )

    def extract_customer_details(self, text: str) -> str:
        return self._call(
            model=settings.OPENAI_MODEL_EXTRACT,
            messages=[
                {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                {"role": "user", "content": build_customer_details_prompt(text)},
            ],
            temperature=settings.OPENAI_TEMPERATURE_EXTRACT,
            use_json_mode=True,
        )

    def describe_image(self, image_url: str, product_name: str) -> str:
        return self._call(
            model=settings.OPENAI_MODEL_VISION,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": build_description_prompt(product_name)},
                        {"type": "image_url", "image_url": {"url": image_url, "detail": "low"}},
                    ],
                }
            ],
            temperature=settings.OPENAI_TEMPERATURE_VISION,
        )

    def describe_upload(self, image: bytes, mime_type: str) -> str:
        return self._call_vision(build_description_prompt(), image, mime_type, allow_empty=True)

    def embed(self, text: str) -> list[float]:
        try:
            resp = self._holder.get().embeddings.create(model=settings.OPENAI_MODEL_EMBEDDING, input=text)
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        embedding = list(resp.data[0].embedding) if resp.data else []
        if len(embedding) != EMBEDDING_DIMENSIONS:
            raise LLMContractError(
                f"Embedding: expected {EMBEDDING_DIMENSIONS} dimensions, got {len(embedding)}."
            )
        return embedding

    def _call_vision(
        self,
        prompt: str,
        image: bytes,
        mime_type: str,
        use_json_mode: bool = False,
        allow_empty: bool = False,
    ) -> str:
        data_url = f"data:{mime_type or 'image/jpeg'};base64,{base64.b64encode(image).decode('ascii')}"
        return self._call(
            model=settings.OPENAI_MODEL_VISION,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
            temperature=settings.OPENAI_TEMPERATURE_VISION,
            use_json_mode=use_json_mode,
            allow_empty=allow_empty,
        )

    def _call(
        self,
        model: str,
        messages: list[dict[str, Any]],
        temperature: float,
        use_json_mode: bool = False,
        allow_empty: bool = False,
    ) -> str:
        try:
            kwargs: dict[str, Any] = {
                "model": model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": 1000,
            }
            if use_json_mode:
                kwargs["response_format"] = {"type": "json_object"}

            resp = self._holder.get().chat.completions.create(**kwargs)
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content and not allow_empty:
            raise LLMContractError("LLM returned empty response text.")

        return content
