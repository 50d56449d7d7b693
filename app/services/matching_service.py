import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from app.core.config import settings
from app.core.exceptions import AuthorizationError, BorrowerNotFoundError
from app.database.data_layer import DataLayer, initialize_data_layer
from app.helpers.response_builder import build_match_response
from app.schemas.offer_schema import OfferSortEnum, SortOrderEnum
from app.schemas.user_schemas import CallerIdentity
from app.services.offer_service import OfferService, offer_service
from app.utils.timeouts import call_dependency

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchingService:
    """Matches an authenticated caller's borrower record to priced offers.

    Each call is independent: authorize, fetch the borrower, run the
    eligibility query, price the results. Every data-layer call is bounded
    by ``timeout_seconds`` and fails closed with DependencyError.
    """

    def __init__(
        self,
        data_layer: DataLayer,
        offers: OfferService = offer_service,
        timeout_seconds: Optional[float] = None,
        default_tenure_years: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.data_layer = data_layer
        self.offers = offers
        self.timeout_seconds = timeout_seconds or settings.MATCH_QUERY_TIMEOUT_SECONDS
        self.default_tenure_years = default_tenure_years or settings.DEFAULT_TENURE_YEARS
        self._clock = clock
        logger.info("MatchingService initialized")

    async def match_offers(
        self,
        borrower_id: str,
        caller: CallerIdentity,
        tenure_years: Optional[int] = None,
        sort_by: Optional[OfferSortEnum] = None,
        sort_order: SortOrderEnum = SortOrderEnum.asc,
    ) -> Dict[str, Any]:
        await self._authorize(borrower_id, caller)

        borrower = await call_dependency(
            self.data_layer.fetch_borrower(borrower_id, caller.id),
            self.timeout_seconds,
            "Borrower lookup",
        )
        if borrower is None:
            logger.warning(f"Borrower {borrower_id} disappeared after authorization for user {caller.id}")
            raise BorrowerNotFoundError()

        products = await call_dependency(
            self.data_layer.match_eligible_products(borrower_id),
            self.timeout_seconds,
            "Product matching",
        )

        offers = self.offers.assemble_offers(
            products,
            borrower.loan_amount_required,
            tenure_years or self.default_tenure_years,
        )
        offers = self.offers.sort_offers(offers, sort_by, sort_order)

        logger.info(f"Generated {len(offers)} offers for user {caller.id}")
        return build_match_response(borrower_id, offers, caller, self._clock())

    # Strict ownership check; runs before any borrower fields are read
    async def _authorize(self, borrower_id: str, caller: CallerIdentity):
        owner_id = await call_dependency(
            self.data_layer.get_borrower_owner(borrower_id),
            self.timeout_seconds,
            "Borrower ownership check",
        )
        if owner_id is None or owner_id != caller.id:
            logger.warning(f"Unauthorized access attempt: user_id={caller.id} "
                           f"requested_borrower_id={borrower_id} found={owner_id is not None}")
            raise AuthorizationError()


# Initialize and return a matching service instance
def initialize_matching_service() -> Optional[MatchingService]:
    try:
        logger.info("Initializing MatchingService...")
        data_layer = initialize_data_layer()
        if data_layer is None:
            return None
        return MatchingService(data_layer)
    except Exception as e:
        logger.error(f"Failed to initialize MatchingService: {e}")
        return None


matching_service = initialize_matching_service()
