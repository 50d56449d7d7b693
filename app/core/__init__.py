from app.core.config import Settings, settings
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BorrowerNotFoundError,
    DependencyError,
    InvalidRequestError,
    MatchingError,
    OfferPricingError,
    RateLimitExceededError,
)
