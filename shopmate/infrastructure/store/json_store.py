from __future__ import annotations

import hashlib
import json
import logging
import threading
from pathlib import Path
from typing import Any

from shopmate.application.ports.session_store import SessionStorePort
from shopmate.domain.entities.conversation import ConversationTurn, Role
from shopmate.domain.entities.product import Product
from shopmate.domain.entities.session_state import SessionState
from shopmate.infrastructure.store.memory_store import is_expired


class JsonSessionStore(SessionStorePort):
    def __init__(self, data_dir: str = "./data/sessions", ttl_seconds: int = 60 * 60 * 24) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._ttl_seconds = ttl_seconds
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, token: str) -> threading.Lock:
        """Get or create a lock for a token."""
        with self._lock_lock:
            if token not in self._locks:
                self._locks[token] = threading.Lock()
            return self._locks[token]

    def _get_file_path(self, token: str) -> Path:
        # Tokens are client-supplied; never use them as file names directly.
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return self._data_dir / f"{digest}.json"

    def get(self, token: str) -> SessionState | None:
        file_path = self._get_file_path(token)
        with self._get_lock(token):
            if not file_path.exists():
                return None
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                self._logger.warning("Corrupted session file ignored", extra={"reason": str(e)})
                return None

            if data.get("token") != token:
                return None
            state = self._deserialize_state(data)
            if is_expired(state, self._ttl_seconds):
                file_path.unlink(missing_ok=True)
                return None
            return state

    def save(self, state: SessionState) -> None:
        """Save session data to JSON file atomically."""
        file_path = self._get_file_path(state.token)
        temp_path = file_path.with_suffix(".json.tmp")

        with self._get_lock(state.token):
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(self._serialize_state(state), f, indent=2, ensure_ascii=False)
                temp_path.replace(file_path)
            except Exception:
                if temp_path.exists():
                    temp_path.unlink(missing_ok=True)
                raise

    def delete(self, token: str) -> None:
        with self._get_lock(token):
            self._get_file_path(token).unlink(missing_ok=True)

    def _serialize_state(self, state: SessionState) -> dict[str, Any]:
        return {
            "token": state.token,
            "active_product": state.active_product.to_row() if state.active_product else None,
            "collecting_customer_info": state.collecting_customer_info,
            "order_placed": state.order_placed,
            "history": [{"role": turn.role.value, "text": turn.text} for turn in state.history],
            "order_key": state.order_key,
            "created_at": state.created_at,
            "updated_at": state.updated_at,
            "version": 1,
        }

    def _deserialize_state(self, data: dict[str, Any]) -> SessionState:
        product_row = data.get("active_product")
        return SessionState(
            token=data["token"],
            active_product=Product.from_row(product_row) if product_row else None,
            collecting_customer_info=bool(data.get("collecting_customer_info", False)),
            order_placed=bool(data.get("order_placed", False)),
            history=tuple(
                ConversationTurn(role=Role(turn.get("role", "user")), text=str(turn.get("text", "")))
                for turn in data.get("history", [])
            ),
            order_key=data.get("order_key"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
