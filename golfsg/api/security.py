"""Security helpers for API authentication."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Query, status

from golfsg.config import Settings, get_settings


def require_api_key(
    x_api_key: str | None = Header(default=None, alias="x-api-key"),
    api_key_query: str | None = Query(default=None, alias="apiKey"),
    settings: Settings = Depends(get_settings),
) -> str | None:
    """Require a matching API key header when enabled in settings.

    Returns the resolved API key (from header or query) so downstream
    dependencies can use the authenticated credential.
    """

    candidate = x_api_key or api_key_query

    if not settings.require_api_key:
        return candidate

    allowed_keys = settings.allowed_api_keys
    if not allowed_keys or candidate not in allowed_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid api key",
        )

    return candidate


__all__ = ["require_api_key"]
