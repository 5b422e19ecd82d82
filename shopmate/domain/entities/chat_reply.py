from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ChatIntent(str, Enum):
    COLLECT_INFO = "COLLECT_INFO"


@dataclass(frozen=True)
class ChatReply:
    reply: str
    intent: ChatIntent | None = None
