"""Bearer token authentication for food endpoints."""

import asyncio
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status

from food_search.adapters.supabase_auth import CallerResolver

if TYPE_CHECKING:
    from food_search.containers import AppContainer


def _get_caller_resolver(request: Request) -> CallerResolver:
    container: AppContainer = request.app.state.container
    return container.caller_resolver


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_caller(
    authorization: str | None = Header(default=None),
    resolver: CallerResolver = Depends(_get_caller_resolver),
) -> UUID:
    """Return the authenticated caller id or reject the request."""
    token = _bearer_token(authorization)
    caller_id = await asyncio.to_thread(resolver.resolve, token) if token else None
    if caller_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return caller_id
