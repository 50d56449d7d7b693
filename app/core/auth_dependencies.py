from fastapi import Depends, HTTPException, status, Request
from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.identity import IdentityProvider, identity_provider
from app.core.security import extract_bearer_token
from app.schemas.user_schemas import CallerIdentity
from app.utils.timeouts import call_dependency
import logging

logger = logging.getLogger(__name__)


# Returns the configured identity provider or raises an error if unavailable
def get_identity_provider() -> IdentityProvider:
    if identity_provider is None:
        logger.error("Identity provider is not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service is not initialized. Please contact system administrator."
        )
    return identity_provider


# Extracts the bearer token and resolves it to the calling account
async def get_current_user(
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> CallerIdentity:
    auth_header = request.headers.get("authorization")
    logger.debug("Authorization header present: %s", bool(auth_header))

    if not auth_header:
        raise AuthenticationError(error="Authorization header required")

    token = extract_bearer_token(auth_header)
    if token is None:
        raise AuthenticationError()

    return await call_dependency(
        provider.get_caller(token),
        settings.MATCH_QUERY_TIMEOUT_SECONDS,
        "Identity lookup",
    )
