"""
Tests for the conversation manager.
"""

from __future__ import annotations

import pytest

from shopmate.application.use_cases.converse import COLLECT_INFO_MARKER, parse_reply
from shopmate.domain.entities.chat_reply import ChatIntent
from shopmate.domain.entities.conversation import ConversationTurn, Role


def test_marker_is_stripped_and_surfaced_as_intent(llm, converse, navy):
    llm.chat_reply = f"Sure! Please send your name, address and phone.{COLLECT_INFO_MARKER}"

    reply = converse.execute(navy, [], "I want to order this")

    assert reply.intent is ChatIntent.COLLECT_INFO
    assert COLLECT_INFO_MARKER not in reply.reply
    assert reply.reply == "Sure! Please send your name, address and phone."


def test_plain_reply_has_no_intent(llm, converse):
    llm.chat_reply = "  It costs 1,250 BDT.  "

    reply = converse.execute(None, [], "price?")

    assert reply.intent is None
    assert reply.reply == "It costs 1,250 BDT."


def test_product_context_in_instruction(llm, converse, navy):
    converse.execute(navy, [], "hi")

    instruction = llm.chat_calls[0]["system_instruction"]
    assert "Classic Navy Polo" in instruction
    assert "1,250 BDT" in instruction
    assert "40 units" in instruction


def test_no_product_context(llm, converse):
    converse.execute(None, [], "hi")

    assert "has not selected a specific product" in llm.chat_calls[0]["system_instruction"]


def test_history_excludes_system_turns(llm, converse):
    history = [
        ConversationTurn(Role.assistant, "Hello!"),
        ConversationTurn(Role.user, "hi"),
        ConversationTurn(Role.system, "Order placed successfully! Order ID: 1"),
    ]

    converse.execute(None, history, "thanks")

    call = llm.chat_calls[0]
    assert [t.role for t in call["history"]] == [Role.assistant, Role.user]
    assert call["user_message"] == "thanks"
    assert call["preamble"]


def test_blank_message_rejected_without_call(llm, converse):
    with pytest.raises(ValueError):
        converse.execute(None, [], "   ")
    assert llm.calls == []


def test_parse_reply_marker_anywhere():
    reply = parse_reply(f"{COLLECT_INFO_MARKER} Please share your details {COLLECT_INFO_MARKER}")
    assert reply.reply == "Please share your details"
    assert reply.intent is ChatIntent.COLLECT_INFO
