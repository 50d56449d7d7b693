import asyncio
import logging
from typing import Awaitable, TypeVar

from app.core.exceptions import DependencyError, MatchingError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_dependency(awaitable: Awaitable[T], timeout_seconds: float, operation: str) -> T:
    """Await an external call, failing closed with DependencyError.

    Typed MatchingError subclasses raised by the collaborator pass through
    untouched; timeouts and unexpected exceptions are logged and converted.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except MatchingError:
        raise
    except asyncio.TimeoutError:
        logger.error(f"{operation} timed out after {timeout_seconds}s")
        raise DependencyError(details=f"{operation} timed out")
    except Exception as e:
        logger.error(f"{operation} failed: {e}")
        raise DependencyError() from e
