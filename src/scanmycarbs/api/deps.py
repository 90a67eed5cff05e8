"""Request dependencies shared by the API routers."""

from fastapi import Depends, Header, Request

from scanmycarbs.containers import AppContainer
from scanmycarbs.domain.models import UserRecord


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def current_user(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> UserRecord:
    """Require an authenticated caller."""
    return container.auth_service.authenticate(authorization)


def optional_user(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> UserRecord | None:
    """Resolve the caller when a valid token is sent; anonymous otherwise."""
    return container.auth_service.authenticate_optional(authorization)
