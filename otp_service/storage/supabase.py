"""
Supabase (PostgREST) backed user directory and OTP store.

Talks to PostgREST directly over httpx with a small chainable query builder
that mirrors the supabase-py call style.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from otp_service.config import settings
from otp_service.models.otp import ChannelType, OtpRecord, User
from otp_service.storage.base import OtpStore, UserDirectory

logger = logging.getLogger("otp-service")


@dataclass
class QueryResult:
    data: list[dict[str, Any]]


class QueryBuilder:
    """Chainable PostgREST query builder."""

    def __init__(self, client: httpx.Client, table: str, base_url: str, headers: dict):
        self._client = client
        self._base_url = f"{base_url}/rest/v1/{table}"
        self._headers = headers
        self._params: dict[str, str] = {}
        self._method = "GET"
        self._body: Any = None

    def select(self, columns: str = "*") -> "QueryBuilder":
        self._method = "GET"
        self._params["select"] = columns
        return self

    def upsert(self, data: dict | list, *, on_conflict: str) -> "QueryBuilder":
        self._method = "POST"
        self._body = data
        self._params["on_conflict"] = on_conflict
        self._headers["Prefer"] = "resolution=merge-duplicates,return=representation"
        return self

    def update(self, data: dict) -> "QueryBuilder":
        self._method = "PATCH"
        self._body = data
        self._headers["Prefer"] = "return=representation"
        return self

    def delete(self) -> "QueryBuilder":
        self._method = "DELETE"
        self._headers["Prefer"] = "return=representation"
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self._params[column] = f"eq.{value}"
        return self

    def is_(self, column: str, value: str) -> "QueryBuilder":
        self._params[column] = f"is.{value}"
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._params["limit"] = str(count)
        return self

    def execute(self) -> QueryResult:
        resp = self._client.request(
            self._method,
            self._base_url,
            params=self._params,
            headers=self._headers,
            json=self._body,
        )
        resp.raise_for_status()

        if not resp.content:
            return QueryResult(data=[])
        data = resp.json()
        if isinstance(data, dict):
            data = [data]
        return QueryResult(data=data if isinstance(data, list) else [])


class SupabaseClient:
    """Minimal Supabase client using PostgREST."""

    def __init__(self, url: str, key: str, *, transport: httpx.BaseTransport | None = None):
        self._url = url.rstrip("/")
        self._key = key
        self._client = httpx.Client(timeout=30.0, transport=transport)

    def _headers(self) -> dict:
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Content-Type": "application/json",
        }

    def table(self, name: str) -> QueryBuilder:
        return QueryBuilder(self._client, name, self._url, self._headers())


_client: SupabaseClient | None = None


def get_supabase() -> SupabaseClient:
    global _client
    if _client is None:
        if not settings.supabase_url:
            raise RuntimeError("SUPABASE_URL is not set")
        _client = SupabaseClient(settings.supabase_url, settings.supabase_key)
    return _client


class SupabaseOtpStore(OtpStore):
    """OTP records in a table with a unique (user_id, type) constraint."""

    def __init__(self, client: SupabaseClient | None = None, table: str | None = None):
        self._client = client
        self._table = table or settings.otp_table

    def _sb(self) -> SupabaseClient:
        return self._client or get_supabase()

    def find_one(self, user_id: str, channel_type: ChannelType) -> OtpRecord | None:
        resp = (
            self._sb().table(self._table)
            .select("*")
            .eq("user_id", user_id)
            .eq("type", channel_type.value)
            .limit(1)
            .execute()
        )
        return OtpRecord.from_row(resp.data[0]) if resp.data else None

    def upsert(self, record: OtpRecord) -> bool:
        resp = self._sb().table(self._table).upsert(record.to_row(), on_conflict="user_id,type").execute()
        return bool(resp.data)

    def mark_verified(self, user_id: str, channel_type: ChannelType, otp: str, at: datetime) -> bool:
        resp = (
            self._sb().table(self._table)
            .update({"verified_at": at.isoformat()})
            .eq("user_id", user_id)
            .eq("type", channel_type.value)
            .eq("otp", otp)
            .is_("verified_at", "null")
            .execute()
        )
        return bool(resp.data)

    def delete(self, user_id: str, channel_type: ChannelType) -> bool:
        resp = (
            self._sb().table(self._table)
            .delete()
            .eq("user_id", user_id)
            .eq("type", channel_type.value)
            .execute()
        )
        return bool(resp.data)

    def ping(self) -> bool:
        self._sb().table(self._table).select("user_id").limit(1).execute()
        return True


class SupabaseUserDirectory(UserDirectory):
    def __init__(self, client: SupabaseClient | None = None, table: str | None = None):
        self._client = client
        self._table = table or settings.users_table

    def _sb(self) -> SupabaseClient:
        return self._client or get_supabase()

    def find_one(self, user_id: str) -> User | None:
        resp = self._sb().table(self._table).select("*").eq("id", user_id).limit(1).execute()
        return User.from_row(resp.data[0]) if resp.data else None

    def update_one(self, user_id: str, patch: dict) -> bool:
        try:
            resp = self._sb().table(self._table).update(patch).eq("id", user_id).execute()
        except httpx.HTTPError as e:
            logger.warning("Failed to update user %s: %s", user_id, e)
            return False
        return bool(resp.data)
