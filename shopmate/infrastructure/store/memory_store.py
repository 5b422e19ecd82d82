from __future__ import annotations

import time

from shopmate.application.ports.session_store import SessionStorePort
from shopmate.domain.entities.session_state import SessionState


class MemorySessionStore(SessionStorePort):
    def __init__(self, ttl_seconds: int = 60 * 60 * 24) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._ttl_seconds = ttl_seconds

    def get(self, token: str) -> SessionState | None:
        state = self._sessions.get(token)
        if state is None:
            return None
        if is_expired(state, self._ttl_seconds):
            self._sessions.pop(token, None)
            return None
        return state

    def save(self, state: SessionState) -> None:
        self._sessions[state.token] = state

    def delete(self, token: str) -> None:
        self._sessions.pop(token, None)


def is_expired(state: SessionState, ttl_seconds: int, now_ts: float | None = None) -> bool:
    if ttl_seconds <= 0:
        return False
    last = state.updated_at or state.created_at
    if last is None:
        return False
    now = now_ts if now_ts is not None else time.time()
    return now - last > ttl_seconds
