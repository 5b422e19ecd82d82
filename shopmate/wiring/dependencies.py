from functools import lru_cache
import logging

from shopmate.core.config import settings
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.ports.llm import LLMPort
from shopmate.application.ports.message_platform import MessagePlatformPort
from shopmate.application.ports.order_store import OrderStorePort
from shopmate.application.ports.session_store import SessionStorePort
from shopmate.application.use_cases.converse import ConverseUseCase
from shopmate.application.use_cases.create_order import CreateOrderUseCase
from shopmate.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from shopmate.application.use_cases.manage_orders import ManageOrdersUseCase
from shopmate.application.use_cases.match_product import MatchProductUseCase
from shopmate.application.use_cases.send_reply import SendReplyUseCase
from shopmate.application.use_cases.session_controller import SessionControllerUseCase
from shopmate.infrastructure.catalog.memory_catalog import MemoryCatalog
from shopmate.infrastructure.catalog.supabase_catalog import SupabaseCatalog
from shopmate.infrastructure.llm.mock_llm import MockLLM
from shopmate.infrastructure.llm.openai_client import openai_client
from shopmate.infrastructure.llm.openai_llm import OpenAILLM
from shopmate.infrastructure.messenger.graph_client import GraphClient
from shopmate.infrastructure.messenger.messenger_platform import MessengerPlatform
from shopmate.infrastructure.messenger.mock_platform import MockMessengerPlatform
from shopmate.infrastructure.orders.memory_order_store import MemoryOrderStore
from shopmate.infrastructure.orders.supabase_order_store import SupabaseOrderStore
from shopmate.infrastructure.store.json_store import JsonSessionStore
from shopmate.infrastructure.store.memory_store import MemorySessionStore
from shopmate.infrastructure.supabase.rest_client import SupabaseRestClient


logger = logging.getLogger(__name__)


@lru_cache
def get_llm() -> LLMPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAILLM()
    logger.info("OPENAI_API_KEY missing; using MockLLM")
    return MockLLM()


@lru_cache
def get_supabase_client() -> SupabaseRestClient | None:
    key = settings.SUPABASE_SERVICE_KEY or settings.SUPABASE_KEY
    if not settings.SUPABASE_URL or not key:
        return None
    return SupabaseRestClient(base_url=settings.SUPABASE_URL, api_key=key)


@lru_cache
def get_catalog() -> CatalogPort:
    client = get_supabase_client()
    if client is not None:
        return SupabaseCatalog(client)
    logger.info("SUPABASE_URL missing; using seeded in-memory catalog", extra={"path": settings.CATALOG_SEED_PATH})
    return MemoryCatalog.from_json(settings.CATALOG_SEED_PATH)


@lru_cache
def get_order_store() -> OrderStorePort:
    client = get_supabase_client()
    if client is not None:
        return SupabaseOrderStore(client)
    return MemoryOrderStore()


@lru_cache
def get_session_store() -> SessionStorePort:
    if settings.SESSION_STORE.lower() == "json":
        return JsonSessionStore(data_dir=settings.SESSION_DATA_DIR, ttl_seconds=settings.SESSION_TTL_SECONDS)
    return MemorySessionStore(ttl_seconds=settings.SESSION_TTL_SECONDS)


def get_match_product_use_case() -> MatchProductUseCase:
    return MatchProductUseCase(
        llm=get_llm(),
        catalog=get_catalog(),
        mode=settings.MATCH_MODE.lower(),
        match_threshold=settings.MATCH_THRESHOLD,
        match_count=settings.MATCH_COUNT,
    )


def get_converse_use_case() -> ConverseUseCase:
    return ConverseUseCase(
        llm=get_llm(),
        assistant_name=settings.ASSISTANT_NAME,
        language=settings.ASSISTANT_LANGUAGE,
        tone=settings.ASSISTANT_TONE,
        currency=settings.CURRENCY,
    )


def get_create_order_use_case() -> CreateOrderUseCase:
    return CreateOrderUseCase(llm=get_llm(), catalog=get_catalog(), orders=get_order_store())


def get_manage_orders_use_case() -> ManageOrdersUseCase:
    return ManageOrdersUseCase(orders=get_order_store(), catalog=get_catalog())


def get_session_controller() -> SessionControllerUseCase:
    return SessionControllerUseCase(
        store=get_session_store(),
        catalog=get_catalog(),
        match_product=get_match_product_use_case(),
        converse=get_converse_use_case(),
        create_order=get_create_order_use_case(),
    )


@lru_cache
def get_graph_client() -> GraphClient | None:
    if not settings.META_PAGE_ACCESS_TOKEN:
        return None
    return GraphClient(access_token=settings.META_PAGE_ACCESS_TOKEN, send_endpoint=settings.META_SEND_ENDPOINT)


@lru_cache
def get_message_platform() -> MessagePlatformPort:
    client = get_graph_client()
    if client is None:
        if settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockMessengerPlatform (token missing, ENV=dev/local)")
            return MockMessengerPlatform()
        raise ValueError("META_PAGE_ACCESS_TOKEN is required to send Messenger replies.")
    return MessengerPlatform(client=client)


@lru_cache
def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    return HandleIncomingMessageUseCase(
        sessions=get_session_controller(),
        send_reply=SendReplyUseCase(platform=get_message_platform(), auto_reply_enabled=settings.AUTO_REPLY_ENABLED),
    )


def shutdown() -> None:
    """Release process-wide clients; the next request rebuilds them lazily."""
    openai_client.close()
    if get_supabase_client.cache_info().currsize:
        client = get_supabase_client()
        if client is not None:
            client.close()
    if get_graph_client.cache_info().currsize:
        graph = get_graph_client()
        if graph is not None:
            graph.close()
    for cached in (
        get_llm,
        get_supabase_client,
        get_catalog,
        get_order_store,
        get_session_store,
        get_graph_client,
        get_message_platform,
        get_handle_incoming_message_use_case,
    ):
        cached.cache_clear()
