from __future__ import annotations

from shopmate.application.ports.message_platform import MessagePlatformPort
from shopmate.infrastructure.messenger.graph_client import GraphClient


class MessengerPlatform(MessagePlatformPort):
    def __init__(self, client: GraphClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send_text(recipient_id=recipient_id, text=text)
