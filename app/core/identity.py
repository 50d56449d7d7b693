import asyncio
import logging
from typing import Optional, Protocol

from supabase import AuthApiError, Client

from app.core.config import settings
from app.core.exceptions import AuthenticationError, DependencyError
from app.core.security import decode_token
from app.core.supabase_client import get_supabase_client
from app.schemas.user_schemas import CallerIdentity

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    async def get_caller(self, token: str) -> CallerIdentity:
        ...


class SupabaseIdentityProvider:
    """Resolves bearer tokens through the Supabase auth API."""

    def __init__(self, client: Client):
        self._client = client

    async def get_caller(self, token: str) -> CallerIdentity:
        try:
            response = await asyncio.to_thread(self._client.auth.get_user, token)
        except AuthApiError as e:
            if getattr(e, "status", 400) >= 500:
                logger.error(f"Identity provider error: {e}")
                raise DependencyError(error="Authentication service unavailable") from e
            logger.warning(f"Token rejected by identity provider: {e}")
            raise AuthenticationError() from e

        user = getattr(response, "user", None) if response else None
        if user is None or not getattr(user, "id", None):
            logger.warning("Identity provider returned no user for token")
            raise AuthenticationError()

        return CallerIdentity(id=str(user.id), email=getattr(user, "email", None), role=getattr(user, "role", None))


class JwtIdentityProvider:
    """Verifies Supabase access tokens locally with the project's JWT secret."""

    def __init__(self, secret: str):
        if not secret:
            raise RuntimeError("JWT identity backend requires SUPABASE_JWT_SECRET")
        self._secret = secret

    async def get_caller(self, token: str) -> CallerIdentity:
        payload = decode_token(token, self._secret)
        if payload is None:
            logger.warning("Token validation failed")
            raise AuthenticationError()

        user_id = payload.get("sub")
        if not user_id:
            logger.debug("No 'sub' field in token payload.")
            raise AuthenticationError()

        return CallerIdentity(id=str(user_id), email=payload.get("email"), role=payload.get("role"))


# Build the identity provider selected by IDENTITY_BACKEND
def initialize_identity_provider() -> Optional[IdentityProvider]:
    try:
        if settings.IDENTITY_BACKEND == "jwt":
            provider = JwtIdentityProvider(settings.SUPABASE_JWT_SECRET)
        elif settings.IDENTITY_BACKEND == "supabase":
            provider = SupabaseIdentityProvider(get_supabase_client())
        else:
            raise RuntimeError(f"Unknown IDENTITY_BACKEND: {settings.IDENTITY_BACKEND}")
        logger.info(f"Identity provider initialized ({settings.IDENTITY_BACKEND})")
        return provider
    except Exception as e:
        logger.error(f"Failed to initialize identity provider: {e}")
        return None


identity_provider = initialize_identity_provider()
