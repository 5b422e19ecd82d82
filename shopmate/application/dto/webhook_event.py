from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from shopmate.domain.entities.message import InboundMessage


class WebhookEventDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[InboundMessage]:
        """Text messages sent by users; echoes of our own replies and attachments-only events are skipped."""
        if self.object != "page":
            return []

        messages: list[InboundMessage] = []
        for entry in self.entry or []:
            for event in entry.get("messaging", []) or []:
                message = event.get("message") or {}
                if message.get("is_echo"):
                    continue

                text = message.get("text")
                mid = message.get("mid")
                sender = (event.get("sender") or {}).get("id")
                recipient = (event.get("recipient") or {}).get("id")
                timestamp = event.get("timestamp")

                if not (mid and sender and text):
                    continue

                messages.append(
                    InboundMessage(
                        id=str(mid),
                        sender_id=str(sender),
                        recipient_id=str(recipient) if recipient else None,
                        text=str(text),
                        timestamp=int(timestamp or 0),
                    )
                )

        return messages
