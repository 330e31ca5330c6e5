"""Common API dependencies: session checks, ACL gates, download tokens."""

from typing import Callable

import jwt
from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shelf import acl
from shelf.errors import Unauthorized
from shelf.services.cover_cache import CoverCache, cover_cache
from shelf.services.events import ActorContext, HubNotifier, Notifier, hub
from shelf.utils.security import decode_token, valid_download_token

bearer_scheme = HTTPBearer(auto_error=False)


def require(resource: acl.Resource, action: acl.Action) -> Callable[..., ActorContext]:
    """Build a dependency that admits sessions allowed to perform action on resource."""

    def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    ) -> ActorContext:
        if credentials is None:
            raise Unauthorized()

        try:
            payload = decode_token(credentials.credentials)
        except jwt.PyJWTError:
            raise Unauthorized()

        role = payload.get("role", "")
        if not acl.allow(role, resource, action):
            raise Unauthorized()

        return ActorContext(
            user_id=payload.get("sub", ""),
            role=role,
            client=request.client.host if request.client else "",
        )

    return dependency


def require_download_token(t: str = Query(default="")) -> None:
    """Export links carry a shareable download token instead of a session."""
    if not valid_download_token(t):
        raise Unauthorized()


def get_notifier() -> Notifier:
    return HubNotifier(hub)


def get_cover_cache() -> CoverCache:
    return cover_cache
