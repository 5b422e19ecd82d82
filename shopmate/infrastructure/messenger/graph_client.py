from __future__ import annotations

import logging

import httpx


class GraphClient:
    """Sends Page messages through the Meta Graph API `me/messages` endpoint."""

    def __init__(self, access_token: str, send_endpoint: str) -> None:
        self._access_token = access_token
        self._send_endpoint = send_endpoint
        self._client = httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        payload = {
            "recipient": {"id": recipient_id},
            "messaging_type": "RESPONSE",
            "message": {"text": text},
        }
        params = {"access_token": self._access_token}
        resp = self._client.post(self._send_endpoint, params=params, json=payload)
        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
            except Exception:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "Messenger send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "reason": error_message,
                    "recipient_id": recipient_id,
                },
            )
            resp.raise_for_status()
        else:
            self._logger.info("Messenger reply sent", extra={"recipient_id": recipient_id})

    def close(self) -> None:
        self._client.close()
