from typing import Dict, Optional


class MatchingError(Exception):
    """Base class for failures surfaced by the offer matching endpoint.

    ``error`` and ``details`` are safe to return to the caller. Anything
    internal (driver messages, stack traces) belongs in the log, not here.
    """

    status_code: int = 500
    default_error: str = "Internal server error"

    def __init__(
        self,
        error: Optional[str] = None,
        details: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error = error or self.default_error
        self.details = details
        self.headers = headers or {}
        super().__init__(self.error)

    def to_dict(self) -> Dict[str, str]:
        body = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class InvalidRequestError(MatchingError):
    status_code = 400
    default_error = "Valid borrower_id is required"


class AuthenticationError(MatchingError):
    status_code = 401
    default_error = "Invalid or expired token"


class AuthorizationError(MatchingError):
    status_code = 403
    default_error = "Unauthorized access to borrower data"


class BorrowerNotFoundError(MatchingError):
    status_code = 404
    default_error = "Borrower data not found or unauthorized access"


class RateLimitExceededError(MatchingError):
    status_code = 429
    default_error = "Rate limit exceeded"


class DependencyError(MatchingError):
    status_code = 500
    default_error = "Failed to fetch offers"


class OfferPricingError(DependencyError):
    default_error = "Failed to price offers"
