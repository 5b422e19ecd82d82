from __future__ import annotations

import logging
from typing import Any

import httpx


class SupabaseRestError(RuntimeError):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Supabase request failed ({status}): {message}")
        self.status = status


class SupabaseRestClient:
    """Minimal PostgREST client for the `products` and `orders` tables and the `match_products` function."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url or not api_key:
            raise ValueError("Supabase URL and key are required")
        self._rest_url = base_url.rstrip("/") + "/rest/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = httpx.Client(timeout=timeout, headers=self._headers, transport=transport)
        self._logger = logging.getLogger(__name__)

    def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        resp = self._request("GET", table, params=params)
        return resp.json() or []

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        resp = self._request(
            "POST",
            table,
            json=[row],
            headers={"Prefer": "return=representation"},
        )
        rows = resp.json() or []
        if not rows:
            raise SupabaseRestError(resp.status_code, "insert returned no rows")
        return rows[0]

    def update(self, table: str, filters: dict[str, str], values: dict[str, Any]) -> list[dict[str, Any]]:
        resp = self._request(
            "PATCH",
            table,
            params=filters,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        return resp.json() or []

    def rpc(self, function: str, args: dict[str, Any]) -> list[dict[str, Any]]:
        """Call a Postgres function exposed by PostgREST (`POST /rpc/<function>`)."""
        resp = self._request("POST", f"rpc/{function}", json=args)
        data = resp.json()
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, table: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._rest_url}/{table}"
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise SupabaseRestError(0, str(e)) from e

        if resp.status_code >= 400:
            try:
                error_json = resp.json()
                message = error_json.get("message") or resp.text
                code = error_json.get("code")
            except Exception:
                message = resp.text
                code = None
            self._logger.error(
                "Supabase request failed",
                extra={"status": resp.status_code, "table": table, "error_code": code, "reason": message},
            )
            raise SupabaseRestError(resp.status_code, message)
        return resp


def in_list(values: list[str]) -> str:
    """PostgREST array literal, quoting each element: {"polo shirt","navy"}."""
    quoted = ",".join('"' + v.replace("\\", "\\\\").replace('"', '\\"') + '"' for v in values)
    return "{" + quoted + "}"
