"""Access token verification against Supabase Auth."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from scanmycarbs.domain.models import AuthenticatedUser
from scanmycarbs.errors import AuthError
from scanmycarbs.services.auth import TokenVerifier

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseTokenVerifier(TokenVerifier):
    """Checks bearer tokens with the project's Supabase Auth server."""

    client: Client

    def verify(self, token: str) -> AuthenticatedUser:
        """Return the identity for a token or raise AuthError."""
        try:
            response = self.client.auth.get_user(token)
        except Exception as exc:
            _logger.info("Rejected access token: %s", exc)
            raise AuthError("Invalid token") from exc
        user = getattr(response, "user", None)
        if user is None:
            raise AuthError("Invalid token")
        try:
            user_id = UUID(str(user.id))
        except ValueError as exc:
            raise AuthError("Invalid token") from exc
        return AuthenticatedUser(id=user_id, email=getattr(user, "email", None))
