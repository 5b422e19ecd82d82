from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    user = "user"
    assistant = "assistant"
    system = "system"


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    text: str

    @staticmethod
    def from_payload(role: str, text: str) -> "ConversationTurn":
        # Gemini-style clients send "model" for assistant turns.
        normalized = str(role or "").strip().lower()
        if normalized in {"model", "bot", "assistant"}:
            return ConversationTurn(role=Role.assistant, text=text)
        if normalized == "system":
            return ConversationTurn(role=Role.system, text=text)
        return ConversationTurn(role=Role.user, text=text)
