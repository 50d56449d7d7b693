import logging
from functools import lru_cache

from supabase import create_client, Client
from app.core.config import settings, mask_secret, mask_url

logger = logging.getLogger(__name__)


def _select_key() -> str:
    """Pick the API key for the configured backends.

    The data layer reads borrowers on behalf of the caller without forwarding
    their JWT and filters by ``user_id`` itself, so it needs the service-role
    key: under the anon key, row-level security hides every borrower row and
    each match would answer 403. Token lookups through ``auth.get_user`` work
    with either key.
    """
    if settings.SUPABASE_SERVICE_ROLE:
        return settings.SUPABASE_SERVICE_ROLE

    if settings.DATA_BACKEND == "supabase":
        logger.error("SUPABASE_SERVICE_ROLE is not configured but DATA_BACKEND=supabase")
        raise RuntimeError("Supabase configuration missing: the supabase data backend requires SUPABASE_SERVICE_ROLE")

    if not settings.SUPABASE_ANON_PUBLIC:
        logger.error("No Supabase key configured (SUPABASE_SERVICE_ROLE or SUPABASE_ANON_PUBLIC)")
        raise RuntimeError("Supabase configuration missing: set SUPABASE_SERVICE_ROLE or SUPABASE_ANON_PUBLIC environment variable")

    logger.info("Using SUPABASE_ANON_PUBLIC for identity lookups only")
    return settings.SUPABASE_ANON_PUBLIC


# Returns the process-wide client shared by the identity provider and the data layer
@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    if not settings.SUPABASE_URL:
        logger.error("SUPABASE_URL is not configured")
        raise RuntimeError("Supabase configuration missing: set SUPABASE_URL environment variable")

    key = _select_key()
    logger.info(f"Connecting to Supabase at {mask_url(settings.SUPABASE_URL)} with key {mask_secret(key)}")
    return create_client(settings.SUPABASE_URL, key)
