"""
Tests for the Messenger webhook: verification, event parsing and reply flow.
"""

from __future__ import annotations

import hashlib
import hmac

from shopmate.application.dto.webhook_event import WebhookEventDTO
from shopmate.application.use_cases.converse import COLLECT_INFO_MARKER
from shopmate.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from shopmate.application.use_cases.send_reply import SendReplyUseCase
from shopmate.domain.entities.message import InboundMessage
from shopmate.infrastructure.messenger.mock_platform import MockMessengerPlatform
from shopmate.infrastructure.messenger.webhook_verify import verify_post_signature, verify_subscription


def _payload(text: str | None = "hello", is_echo: bool = False, obj: str = "page") -> dict:
    message = {"mid": "m_1", "is_echo": is_echo}
    if text is not None:
        message["text"] = text
    return {
        "object": obj,
        "entry": [
            {
                "id": "page_1",
                "messaging": [
                    {
                        "sender": {"id": "user_1"},
                        "recipient": {"id": "page_1"},
                        "timestamp": 1700000000000,
                        "message": message,
                    }
                ],
            }
        ],
    }


def test_verify_subscription():
    assert verify_subscription("subscribe", "secret", "12345", "secret") == "12345"
    assert verify_subscription("subscribe", "wrong", "12345", "secret") is None
    assert verify_subscription("unsubscribe", "secret", "12345", "secret") is None
    assert verify_subscription("subscribe", "", "12345", "") is None


def test_verify_post_signature():
    body = b'{"object":"page"}'
    signature = "sha256=" + hmac.new(b"app-secret", body, hashlib.sha256).hexdigest()

    assert verify_post_signature(body, signature, "app-secret", "prod") is True
    assert verify_post_signature(body, "sha256=deadbeef", "app-secret", "prod") is False
    assert verify_post_signature(body, None, "app-secret", "prod") is False
    assert verify_post_signature(body, None, "app-secret", "dev") is True
    assert verify_post_signature(body, signature, None, "prod") is False


def test_extract_messages():
    messages = WebhookEventDTO.model_validate(_payload("price?")).extract_messages()

    assert messages == [
        InboundMessage(id="m_1", sender_id="user_1", recipient_id="page_1", text="price?", timestamp=1700000000000)
    ]


def test_extract_messages_skips_echo_and_non_text():
    assert WebhookEventDTO.model_validate(_payload(is_echo=True)).extract_messages() == []
    assert WebhookEventDTO.model_validate(_payload(text=None)).extract_messages() == []
    assert WebhookEventDTO.model_validate(_payload(obj="instagram")).extract_messages() == []


def test_incoming_message_runs_through_session(sessions, llm):
    platform = MockMessengerPlatform()
    use_case = HandleIncomingMessageUseCase(
        sessions=sessions,
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=True),
    )
    llm.chat_reply = f"Please share your details.{COLLECT_INFO_MARKER}"
    message = InboundMessage(id="m_1", sender_id="user_1", recipient_id="page_1", text="hi", timestamp=1)

    use_case.handle(message)
    use_case.handle(message)

    assert platform.sent == [("user_1", "Please share your details.")]
    state = sessions.resume("messenger:user_1")
    assert [t.text for t in state.history][-2:] == ["hi", "Please share your details."]


def test_auto_reply_disabled_skips_send(sessions):
    platform = MockMessengerPlatform()
    use_case = HandleIncomingMessageUseCase(
        sessions=sessions,
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=False),
    )

    use_case.handle(InboundMessage(id="m_2", sender_id="user_2", recipient_id=None, text="hi", timestamp=1))

    assert platform.sent == []


def test_processed_message_ids_are_bounded(sessions, llm):
    platform = MockMessengerPlatform()
    use_case = HandleIncomingMessageUseCase(
        sessions=sessions,
        send_reply=SendReplyUseCase(platform=platform, auto_reply_enabled=True),
        max_processed=2,
    )
    llm.chat_reply = "ok"

    for mid in ("m_1", "m_2", "m_3", "m_1"):
        use_case.handle(InboundMessage(id=mid, sender_id="user_3", recipient_id=None, text="hi", timestamp=1))
    use_case.handle(InboundMessage(id="m_3", sender_id="user_3", recipient_id=None, text="hi", timestamp=1))

    # m_1 was evicted and handled again; m_3 is still remembered.
    assert len(platform.sent) == 4
