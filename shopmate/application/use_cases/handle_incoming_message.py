from __future__ import annotations

import logging
from collections import OrderedDict

from shopmate.application.use_cases.send_reply import SendReplyUseCase
from shopmate.application.use_cases.session_controller import SessionControllerUseCase
from shopmate.domain.entities.conversation import Role
from shopmate.domain.entities.message import InboundMessage

MESSENGER_SESSION_PREFIX = "messenger:"
MAX_PROCESSED_IDS = 1000


class HandleIncomingMessageUseCase:
    """Feeds a messenger DM through the sender's session and sends back whatever the session appended."""

    def __init__(
        self,
        sessions: SessionControllerUseCase,
        send_reply: SendReplyUseCase,
        max_processed: int = MAX_PROCESSED_IDS,
    ) -> None:
        self._sessions = sessions
        self._send_reply = send_reply
        # Most recent message ids, oldest first.
        self._processed: OrderedDict[str, None] = OrderedDict()
        self._max_processed = max_processed
        self._logger = logging.getLogger(__name__)

    def handle(self, message: InboundMessage) -> None:
        if message.id in self._processed:
            self._logger.info("Duplicate message ignored", extra={"message_id": message.id})
            return
        self._mark_processed(message.id)

        token = MESSENGER_SESSION_PREFIX + message.sender_id
        try:
            before = self._sessions.get_or_start(token)
            after = self._sessions.send_message(token, message.text)
        except Exception as e:
            self._logger.exception("Failed to handle message", extra={"message_id": message.id, "reason": str(e)})
            return

        # The user turn sits at len(before.history); everything after it is the response.
        new_turns = after.history[len(before.history) + 1 :]
        reply_text = "\n\n".join(turn.text for turn in new_turns if turn.role in (Role.assistant, Role.system))
        try:
            sent = self._send_reply.execute(recipient_id=message.sender_id, text=reply_text)
        except Exception as e:
            self._logger.exception("Failed to send reply", extra={"message_id": message.id, "reason": str(e)})
            return
        self._logger.info("Message handled", extra={"message_id": message.id, "reply_sent": sent})

    def _mark_processed(self, message_id: str) -> None:
        self._processed[message_id] = None
        while len(self._processed) > self._max_processed:
            self._processed.popitem(last=False)
