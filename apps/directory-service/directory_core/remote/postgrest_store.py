"""
Remote store client for a hosted Supabase/PostgREST endpoint.

Tables are addressed as ``{url}/rest/v1/{table}``; nested parent selection
uses PostgREST's embedded resources (``select=*,commission(id,name_ar)``).
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

import requests

from directory_core.remote.base import Join, RemoteStoreError, Row, is_multi_value

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = (3, 30)


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote_list_item(value: Any) -> str:
    text = _format_value(value)
    if any(ch in text for ch in ',()"'):
        escaped = text.replace('"', '\\"')
        return f'"{escaped}"'
    return text


def build_filter_params(match: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """Translate ``column -> value`` filters into PostgREST query parameters."""
    params: dict[str, str] = {}
    for key, value in (match or {}).items():
        if is_multi_value(value):
            items = ",".join(_quote_list_item(v) for v in sorted(value, key=str))
            params[key] = f"in.({items})"
        elif value is None:
            params[key] = "is.null"
        else:
            params[key] = f"eq.{_format_value(value)}"
    return params


def build_select_param(columns: Sequence[str], joins: Iterable[Join]) -> str:
    parts = [",".join(columns) if columns else "*"]
    for join in joins:
        embedded = ",".join(join.columns)
        if join.foreign_key:
            # disambiguate through the foreign key column
            parts.append(f"{join.table}!{join.foreign_key}({embedded})")
        else:
            parts.append(f"{join.table}({embedded})")
    return ",".join(parts)


class PostgrestRemoteStore:
    """Remote store speaking the PostgREST HTTP dialect through ``requests``."""

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        schema: str = "public",
        timeout: Any = _DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = url.rstrip("/")
        self.api_key = api_key
        self.schema = schema
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, *, write: bool = False, prefer: Optional[str] = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        if write:
            headers["Content-Type"] = "application/json"
            headers["Content-Profile"] = self.schema
        else:
            headers["Accept-Profile"] = self.schema
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _endpoint(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    async def select(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        *,
        joins: Iterable[Join] = (),
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Row]:
        params = {"select": build_select_param(columns, joins)}
        params.update(build_filter_params(filters))
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        payload = await self._request("GET", table, params=params, headers=self._headers())
        return list(payload or [])

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        if not rows:
            return []
        payload = await self._request(
            "POST",
            table,
            json=[dict(r) for r in rows],
            headers=self._headers(write=True, prefer="return=representation"),
        )
        return list(payload or [])

    async def update(self, table: str, values: Mapping[str, Any], *, match: Mapping[str, Any]) -> None:
        if not match:
            raise RemoteStoreError("UPDATE requires a WHERE clause")
        await self._request(
            "PATCH",
            table,
            params=build_filter_params(match),
            json=dict(values),
            headers=self._headers(write=True, prefer="return=minimal"),
        )

    async def delete(self, table: str, *, match: Mapping[str, Any]) -> None:
        if not match:
            raise RemoteStoreError("DELETE requires a WHERE clause")
        await self._request(
            "DELETE",
            table,
            params=build_filter_params(match),
            headers=self._headers(write=True, prefer="return=minimal"),
        )

    async def _request(self, method: str, table: str, **kwargs) -> Any:
        return await asyncio.to_thread(self._send, method, table, **kwargs)

    def _send(self, method: str, table: str, **kwargs) -> Any:
        url = self._endpoint(table)
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("PostgREST %s %s failed: %s", method, table, exc)
            raise RemoteStoreError(str(exc)) from exc
        if not response.ok:
            raise RemoteStoreError(self._error_detail(response))
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStoreError(f"Unexpected response from {table}: {exc}") from exc

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in ("message", "error_description", "error", "hint"):
                if body.get(key):
                    return str(body[key])
        text = (response.text or "").strip()
        return text or f"HTTP {response.status_code}"
