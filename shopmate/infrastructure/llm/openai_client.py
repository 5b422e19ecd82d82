from __future__ import annotations

import logging
import threading

from openai import OpenAI

from shopmate.core.config import settings

logger = logging.getLogger(__name__)


class OpenAIClientHolder:
    """
    Process-wide OpenAI client, built on first use.

    `get()` initializes at most once even when several request threads race
    on the first call. `close()` releases the underlying HTTP pool and lets a
    later `get()` build a fresh client.
    """

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key
        self._client: OpenAI | None = None
        self._lock = threading.Lock()

    def get(self) -> OpenAI:
        client = self._client
        if client is not None:
            return client
        with self._lock:
            if self._client is None:
                logger.info("Initializing OpenAI client")
                self._client = OpenAI(api_key=self._api_key or settings.OPENAI_API_KEY)
            return self._client

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
                logger.info("OpenAI client closed")

    @property
    def initialized(self) -> bool:
        return self._client is not None


openai_client = OpenAIClientHolder()
