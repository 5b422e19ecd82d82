from __future__ import annotations

import pytest

from shopmate.application.exceptions import LLMUpstreamError
from shopmate.application.ports.llm import LLMPort
from shopmate.application.use_cases.converse import ConverseUseCase
from shopmate.application.use_cases.create_order import CreateOrderUseCase
from shopmate.application.use_cases.match_product import MatchProductUseCase
from shopmate.application.use_cases.session_controller import SessionControllerUseCase
from shopmate.domain.entities.conversation import ConversationTurn
from shopmate.domain.entities.product import Product
from shopmate.infrastructure.catalog.memory_catalog import MemoryCatalog
from shopmate.infrastructure.orders.memory_order_store import MemoryOrderStore
from shopmate.infrastructure.store.memory_store import MemorySessionStore


class FakeLLM(LLMPort):
    """Scriptable LLM that records every call."""

    def __init__(self) -> None:
        self.keywords = "polo shirt, navy"
        self.category = '{"category": "shirt"}'
        self.best_code = ""
        self.chat_reply = "Hello!"
        self.details = '{"name": "John", "address": "123 Main St", "phone": "555-1234"}'
        self.upload_description = "brown leather chelsea boots"
        self.embedding: list[float] = [0.1] * 1536
        self.fail_with: Exception | None = None
        self.calls: list[str] = []
        self.chat_calls: list[dict] = []
        self.disambiguation_candidates: list[Product] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def extract_keywords(self, image: bytes, mime_type: str) -> str:
        self._record("extract_keywords")
        return self.keywords

    def classify_category(self, image: bytes, mime_type: str) -> str:
        self._record("classify_category")
        return self.category

    def pick_best_match(self, image: bytes, mime_type: str, candidates: list[Product]) -> str:
        self._record("pick_best_match")
        self.disambiguation_candidates = list(candidates)
        return self.best_code

    def chat(self, system_instruction: str, preamble: str, history: list[ConversationTurn], user_message: str) -> str:
        self._record("chat")
        self.chat_calls.append(
            {"system_instruction": system_instruction, "preamble": preamble, "history": list(history), "user_message": user_message}
        )
        return self.chat_reply

    def extract_customer_details(self, text: str) -> str:
        self._record("extract_customer_details")
        return self.details

    def describe_image(self, image_url: str, product_name: str) -> str:
        self._record("describe_image")
        return f"description of {product_name}"

    def describe_upload(self, image: bytes, mime_type: str) -> str:
        self._record("describe_upload")
        return self.upload_description

    def embed(self, text: str) -> list[float]:
        self._record("embed")
        return list(self.embedding)


class RecordingCatalog(MemoryCatalog):
    def __init__(self, products: list[Product] | None = None) -> None:
        super().__init__(products)
        self.calls: list[str] = []

    def find_by_tags(self, keywords: list[str]) -> list[Product]:
        self.calls.append("find_by_tags")
        return super().find_by_tags(keywords)

    def find_by_category(self, category: str) -> list[Product]:
        self.calls.append("find_by_category")
        return super().find_by_category(category)

    def match_by_embedding(self, embedding: list[float], threshold: float, count: int) -> list[Product]:
        self.calls.append("match_by_embedding")
        return super().match_by_embedding(embedding, threshold, count)


POLO_NAVY = Product(
    id="p-1",
    name="Classic Navy Polo",
    code="POLO-NV",
    price=1250,
    stock=40,
    category="shirt",
    tags=("polo shirt", "navy", "cotton"),
)
POLO_WHITE = Product(
    id="p-2",
    name="White Pique Polo",
    code="POLO-WH",
    price=1150,
    stock=25,
    category="shirt",
    tags=("polo shirt", "white"),
)
BOOTS = Product(
    id="p-3",
    name="Leather Chelsea Boots",
    code="BOOT-BR",
    price=4800,
    stock=8,
    category="footwear",
    tags=("boots", "leather", "brown"),
)


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def catalog() -> RecordingCatalog:
    return RecordingCatalog([POLO_NAVY, POLO_WHITE, BOOTS])


@pytest.fixture
def orders() -> MemoryOrderStore:
    return MemoryOrderStore()


@pytest.fixture
def matcher(llm, catalog) -> MatchProductUseCase:
    return MatchProductUseCase(llm=llm, catalog=catalog)


@pytest.fixture
def converse(llm) -> ConverseUseCase:
    return ConverseUseCase(llm=llm)


@pytest.fixture
def create_order(llm, catalog, orders) -> CreateOrderUseCase:
    return CreateOrderUseCase(llm=llm, catalog=catalog, orders=orders)


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def sessions(session_store, catalog, matcher, converse, create_order) -> SessionControllerUseCase:
    return SessionControllerUseCase(
        store=session_store,
        catalog=catalog,
        match_product=matcher,
        converse=converse,
        create_order=create_order,
    )


@pytest.fixture
def upstream_error() -> LLMUpstreamError:
    return LLMUpstreamError("OpenAI API error: quota exceeded")


@pytest.fixture
def navy() -> Product:
    return POLO_NAVY


@pytest.fixture
def white() -> Product:
    return POLO_WHITE


@pytest.fixture
def boots() -> Product:
    return BOOTS
