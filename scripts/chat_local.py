#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no Messenger).

Usage:
  python3 scripts/chat_local.py

What it does:
- Starts a server-side session through the same SessionControllerUseCase the API uses
- Sends typed messages, uploads image files with /image <path>, places orders with /order
- Prints every new turn plus the session flags after each action
"""
from __future__ import annotations

import mimetypes
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shopmate.domain.entities.session_state import SessionState
from shopmate.wiring.dependencies import get_session_controller, shutdown


def _print_header(token: str) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"session: {token}")
    print("Type your message and press Enter.")
    print("Commands: /image <path>, /order, /new, /state, /quit, /help")
    print("-" * 60)


def _print_new_turns(before: SessionState, after: SessionState) -> None:
    for turn in after.history[len(before.history):]:
        if turn.role.value == "user":
            continue
        print(f"({turn.role.value}) {turn.text}")


def _print_state(state: SessionState) -> None:
    product = state.active_product
    print(f"active_product: {product.name if product else None}")
    print(f"collecting_customer_info: {state.collecting_customer_info}")
    print(f"order_placed: {state.order_placed}")


def main() -> None:
    sessions = get_session_controller()
    state = sessions.start()
    _print_header(state.token)
    print(f"(assistant) {state.history[-1].text}")

    try:
        while True:
            try:
                user_text = input("\n> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            if not user_text:
                continue

            cmd = user_text.lower()
            if cmd in ("/quit", "/exit"):
                print("Bye!")
                return
            if cmd == "/help":
                print("Commands:")
                print("  /image <path> -> upload a product photo")
                print("  /order        -> place an order for the active product")
                print("  /new          -> start a new session")
                print("  /state        -> show session flags")
                print("  /quit         -> exit")
                continue
            if cmd == "/new":
                sessions.reset(state.token)
                state = sessions.start()
                print(f"New session: {state.token}")
                continue
            if cmd == "/state":
                _print_state(state)
                continue

            before = state
            try:
                if cmd.startswith("/image"):
                    path = Path(user_text[len("/image"):].strip()).expanduser()
                    mime = mimetypes.guess_type(path.name)[0] or "image/jpeg"
                    state = sessions.upload_image(state.token, path.read_bytes(), mime)
                elif cmd == "/order":
                    state = sessions.place_order(state.token)
                else:
                    state = sessions.send_message(state.token, user_text)
            except (OSError, ValueError) as e:
                print(f"ERROR: {e}")
                continue

            _print_new_turns(before, state)
            print("-" * 60)
    finally:
        shutdown()


if __name__ == "__main__":
    main()
