from __future__ import annotations

import logging

from shopmate.application.ports.message_platform import MessagePlatformPort


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, auto_reply_enabled: bool) -> None:
        self._platform = platform
        self._auto_reply_enabled = auto_reply_enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, recipient_id: str, text: str) -> bool:
        """Send a reply. Returns True if actually sent, False if skipped."""
        if not text:
            return False
        if not self._auto_reply_enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"recipient_id": recipient_id, "reply_text": text})
            return False
        self._platform.send_text(recipient_id=recipient_id, text=text)
        return True
