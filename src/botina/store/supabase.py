"""Supabase (PostgREST) storage for user records."""

from typing import Any

import httpx

from ..errors import PersistenceUnavailable
from .models import DEFAULT_HISTORY_CAP, UserRecord


class SupabaseUserStore:
    """User records in a Supabase table, accessed through its REST API.

    The table uses the UserRecord.to_dict() column names, with user_id as
    the primary key and chat_history as a jsonb column.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "profiles",
        timeout: float = 10.0,
        history_cap: int = DEFAULT_HISTORY_CAP,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.table = table
        self.history_cap = history_cap
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        params: dict[str, str],
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = await self._client.request(
                method, self._endpoint, params=params, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PersistenceUnavailable(f"Supabase {method} {self.table} failed: {e}") from e
        return response

    def _parse_rows(self, response: httpx.Response) -> list[UserRecord]:
        try:
            rows = response.json()
        except ValueError as e:
            raise PersistenceUnavailable(f"Supabase returned invalid JSON: {e}") from e
        return [UserRecord.from_dict(row, history_cap=self.history_cap) for row in rows]

    async def get_all_users(self) -> list[UserRecord]:
        response = await self._request("GET", {"select": "*"})
        return self._parse_rows(response)

    async def get_user(self, user_id: str) -> UserRecord | None:
        response = await self._request(
            "GET", {"select": "*", "user_id": f"eq.{user_id}", "limit": "1"}
        )
        records = self._parse_rows(response)
        return records[0] if records else None

    async def upsert_user(self, record: UserRecord) -> None:
        await self._request(
            "POST",
            {"on_conflict": "user_id"},
            json=[record.to_dict()],
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def close(self) -> None:
        await self._client.aclose()
