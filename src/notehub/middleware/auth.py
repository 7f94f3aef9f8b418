"""Authentication middleware."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.exceptions import Unauthenticated
from ..core.schemas.identity import Viewer
from ..security import get_viewer_from_token


class JWTBearer(HTTPBearer):
    """JWT Bearer token authentication.

    Every failure (missing header, wrong scheme, bad or expired token) is
    reported as 401 Unauthenticated.
    """

    def __init__(self):
        super(JWTBearer, self).__init__(auto_error=False)

    async def __call__(self, request: Request) -> Viewer:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if not credentials:
            raise Unauthenticated("Not authenticated")

        if credentials.scheme.lower() != "bearer":
            raise Unauthenticated("Invalid authentication scheme")

        viewer = get_viewer_from_token(credentials.credentials)
        if viewer is None:
            raise Unauthenticated("Invalid token or expired token")

        return viewer


# Dependency for getting the calling user from the JWT
async def get_current_viewer(viewer: Viewer = Depends(JWTBearer())) -> Viewer:
    """Get current authenticated viewer."""
    return viewer
