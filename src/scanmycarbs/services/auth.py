"""Authentication boundary: bearer token to user profile."""

from dataclasses import dataclass
from typing import Protocol

from scanmycarbs.domain.models import AuthenticatedUser, UserRecord
from scanmycarbs.errors import AuthError
from scanmycarbs.services.users import UserService


class TokenVerifier(Protocol):
    """Verifies access tokens issued by the identity provider."""

    def verify(self, token: str) -> AuthenticatedUser:
        """Return the identity for a token or raise AuthError."""


@dataclass
class AuthService:
    """Resolves Authorization headers to user profiles."""

    verifier: TokenVerifier
    user_service: UserService

    def authenticate(self, authorization: str | None) -> UserRecord:
        """Require a valid ``Bearer`` token."""
        token = _bearer_token(authorization)
        if token is None:
            raise AuthError("Token not provided")
        identity = self.verifier.verify(token)
        return self.user_service.ensure_user(identity.id, identity.email)

    def authenticate_optional(self, authorization: str | None) -> UserRecord | None:
        """Return the user for a valid token; anonymous otherwise."""
        try:
            return self.authenticate(authorization)
        except AuthError:
            return None


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
