# backend/sparkvibe/adapters/supabase_client.py
from __future__ import annotations

import threading
from typing import Optional, Dict

from supabase import Client, create_client

try:  # supabase>=2.6
    from supabase.lib.client_options import SyncClientOptions as ClientOptions  # type: ignore
except ImportError:  # pragma: no cover
    ClientOptions = None  # type: ignore

from sparkvibe.core.config import Settings

__all__ = ["SupabaseHandle", "build_client", "supa_ping"]


def build_client(
    url: str,
    key: str,
    *,
    timeout_s: float,
    schema: Optional[str],
    extra_headers: Optional[Dict[str, str]] = None,
) -> Client:
    """
    Build a Supabase Client with timeouts/headers when supported by the SDK.
    """
    headers = {"X-Client-Info": "sparkvibe-backend", **(extra_headers or {})}
    if ClientOptions is not None:
        opts = ClientOptions(
            postgrest_client_timeout=timeout_s,
            storage_client_timeout=timeout_s,
            headers=headers,
            schema=(schema or "public"),
        )
        return create_client(url, key, options=opts)
    return create_client(url, key)


class SupabaseHandle:
    """
    Lazily constructed service-role client. One handle per app, passed to the
    stores that need it; construction errors surface on first use so the app
    still boots without credentials.
    """

    def __init__(self, settings: Settings, *, readonly: bool = False):
        self._settings = settings
        self._readonly = readonly
        self._lock = threading.Lock()
        self._client: Optional[Client] = None

    @property
    def configured(self) -> bool:
        s = self._settings
        key = s.SUPABASE_ANON_KEY if self._readonly else s.SUPABASE_SERVICE_ROLE
        return bool(s.SUPABASE_URL and key)

    def client(self) -> Client:
        if self._client is not None:
            return self._client
        with self._lock:
            if self._client is None:
                s = self._settings
                key = s.SUPABASE_ANON_KEY if self._readonly else s.SUPABASE_SERVICE_ROLE
                if not s.SUPABASE_URL or not key:
                    kind = "SUPABASE_URL/ANON_KEY" if self._readonly else "SUPABASE_URL/SERVICE_ROLE"
                    raise RuntimeError(f"Missing required Supabase settings ({kind})")
                self._client = build_client(
                    str(s.SUPABASE_URL).rstrip("/"),
                    key,
                    timeout_s=s.SUPABASE_TIMEOUT_S,
                    schema=s.SUPABASE_SCHEMA,
                )
        return self._client

    def reset(self) -> None:
        """Drop the cached client (handy for tests or when rotating keys)."""
        with self._lock:
            self._client = None


def supa_ping(handle: SupabaseHandle, table: str) -> bool:
    """
    Lightweight health check: a zero-row select on `table`.
    """
    try:
        handle.client().table(table).select("user_id").limit(0).execute()
        return True
    except Exception:
        return False
