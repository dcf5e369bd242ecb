"""Authentication dependencies for FastAPI."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase_auth

logger = get_logger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """The Supabase user behind a bearer token."""

    id: str
    email: str
    display_name: str | None = None

    @property
    def name_parts(self) -> tuple[str, str]:
        """(given name, surname) from the display name, defaulting to ("User", "")."""
        parts = (self.display_name or "").split()
        given = parts[0] if parts else "User"
        surname = parts[1] if len(parts) > 1 else ""
        return given, surname


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_authenticated_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    client: Client = Depends(get_supabase_auth),
) -> AuthenticatedUser:
    """
    Resolve the bearer token to a Supabase user.

    Raises:
        HTTPException: 401 when the header is missing, the token is invalid,
            or the user has no email address
    """
    if not credentials:
        raise _unauthorized("No authorization header provided")

    try:
        auth_response = client.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.warning(f"Token validation failed: {e}")
        raise _unauthorized(f"Authentication error: {e}") from e

    user = auth_response.user if auth_response else None
    if not user or not user.email:
        raise _unauthorized("User not authenticated or email not available")

    metadata = user.user_metadata or {}
    logger.debug("User authenticated", extra={"user_id": user.id})
    return AuthenticatedUser(
        id=str(user.id),
        email=user.email,
        display_name=metadata.get("display_name"),
    )
