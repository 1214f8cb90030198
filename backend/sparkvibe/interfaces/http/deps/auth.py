# backend/sparkvibe/interfaces/http/deps/auth.py
from __future__ import annotations

from typing import Optional, Dict, Any, Annotated

from fastapi import Depends, Header, HTTPException

from sparkvibe.adapters.supabase_auth import verify_supabase_token, SupabaseAuthError
from sparkvibe.core.container import Services
from sparkvibe.interfaces.http.deps.services import get_services

# NOTE: Put *no* default inside Header(); use alias to bind "Authorization".
# The default (None) lives on the function parameter.
AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]

DEV_USER: Dict[str, Any] = {"id": "dev-user", "claims": {"dev": True}}


def _claims_to_user(claims: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize auth claims into a compact user dict the app expects.
    """
    return {"id": claims.get("sub"), "claims": claims}


def _extract_bearer(auth: Optional[str]) -> str:
    """
    Extract the bearer token from the Authorization header.
    Raises HTTP 401 on any format error.
    """
    if not auth:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    parts = auth.strip().split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Expected 'Bearer <token>'")
    return parts[1]


def _verify(token: str, services: Services) -> Dict[str, Any]:
    s = services.settings
    claims = verify_supabase_token(
        token,
        url=str(s.SUPABASE_URL) if s.SUPABASE_URL else None,
        anon_key=s.SUPABASE_ANON_KEY,
    )
    return _claims_to_user(claims)


def get_current_user(
    authorization: AuthHeader = None,
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    """
    Strict auth dependency. In dev, can be bypassed with DEV_BYPASS_AUTH=1.
    """
    if services.settings.DEV_BYPASS_AUTH:
        return dict(DEV_USER)

    token = _extract_bearer(authorization)
    try:
        return _verify(token, services)
    except SupabaseAuthError:
        # Keep errors terse; avoid leaking internals
        raise HTTPException(status_code=401, detail="Invalid token")


def get_optional_user(
    authorization: AuthHeader = None,
    services: Services = Depends(get_services),
) -> Optional[Dict[str, Any]]:
    """
    Optional auth dependency. Returns None when there is no Authorization
    header or the token does not verify (public routes never error on auth).
    """
    if services.settings.DEV_BYPASS_AUTH:
        return dict(DEV_USER)
    if not authorization:
        return None
    try:
        return _verify(_extract_bearer(authorization), services)
    except (HTTPException, SupabaseAuthError):
        return None


__all__ = [
    "AuthHeader",
    "get_current_user",
    "get_optional_user",
]
