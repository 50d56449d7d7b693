from jose import jwt, JWTError
from typing import Optional, Dict, Any
from app.core.config import settings


# Pulls the raw token out of an "Authorization: Bearer <token>" header value
def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header:
        return None
    scheme, _, token = auth_header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


# Decodes and validates a Supabase-issued JWT returning its payload
def decode_token(token: str, secret: Optional[str] = None) -> Optional[Dict[str, Any]]:
    key = secret or settings.SUPABASE_JWT_SECRET
    if not key:
        return None
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return payload
    except JWTError:
        return None
