from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender_id: str
    recipient_id: str | None
    text: str
    timestamp: int
