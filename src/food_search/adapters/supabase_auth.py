"""Resolve bearer tokens to Supabase user ids."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from supabase import Client

_logger = logging.getLogger(__name__)


class CallerResolver(Protocol):
    """Maps an access token to the authenticated caller id."""

    def resolve(self, access_token: str) -> UUID | None:
        """Return the caller id, or None when the token is not valid."""


@dataclass
class SupabaseCallerResolver(CallerResolver):
    """Validates access tokens with Supabase Auth."""

    client: Client

    def resolve(self, access_token: str) -> UUID | None:
        """Return the Supabase user id for a token."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception:
            _logger.info("Rejected access token", exc_info=True)
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        return UUID(str(user.id))
