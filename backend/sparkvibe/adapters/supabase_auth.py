from __future__ import annotations

from typing import Any, Dict, Optional

import httpx


class SupabaseAuthError(Exception):
    pass


def verify_supabase_token(
    token: str,
    *,
    url: Optional[str],
    anon_key: Optional[str],
    timeout_s: float = 5.0,
) -> Dict[str, Any]:
    """
    Verify a Supabase (GoTrue) access token by calling the user endpoint.

    This does not require server secrets. It uses the project's public `apikey`
    (anon key) and the bearer user token to retrieve the user. If valid, returns
    a dict including at least {"sub": <user_id>}.
    """
    base = (url or "").rstrip("/")
    if not base or not anon_key:
        raise SupabaseAuthError("Missing SUPABASE_URL or SUPABASE_ANON_KEY")

    headers = {
        "Authorization": f"Bearer {token}",
        "apikey": anon_key,
        "accept": "application/json",
    }

    try:
        with httpx.Client(timeout=httpx.Timeout(timeout_s)) as client:
            resp = client.get(f"{base}/auth/v1/user", headers=headers)
    except httpx.HTTPError as e:
        raise SupabaseAuthError(f"Auth verification failed: {e}") from e

    if resp.status_code != 200:
        raise SupabaseAuthError("Invalid token")
    data = resp.json() or {}
    user_id = data.get("id") or data.get("sub")
    if not user_id:
        raise SupabaseAuthError("Token verified but user id missing")
    data.setdefault("sub", user_id)
    return data
