from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi import status
from typing import Optional
import logging

from app.core.auth_dependencies import get_current_user
from app.core.config import settings
from app.core.exceptions import DependencyError, InvalidRequestError, MatchingError
from app.core.rate_limiter import RateLimitResult, enforce_rate_limit
from app.schemas.offer_schema import (
    EmiCalculationRequest,
    EmiCalculationResponse,
    ErrorResponse,
    MatchOffersRequest,
    MatchOffersResponse,
    OfferSortEnum,
    SortOrderEnum,
)
from app.schemas.user_schemas import CallerIdentity
from app.services.emi_service import calculate_emi, calculate_total_interest, tenure_options
from app.services.matching_service import MatchingService, matching_service

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


# Returns the matching service instance or raises an error if unavailable
def get_matching_service() -> MatchingService:
    if matching_service is None:
        logger.error("Matching service is not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Matching service is not initialized. Please contact system administrator."
        )

    return matching_service

router = APIRouter(prefix="/offers", tags=["Offers"])

# Matches the caller's borrower record against active products and prices each offer
@router.post("/match", response_model=MatchOffersResponse, responses=ERROR_RESPONSES)
async def match_offers(
    request_data: MatchOffersRequest,
    tenure_years: Optional[int] = Query(default=None, ge=1, le=30, description="Comparison tenure in years"),
    sort_by: Optional[OfferSortEnum] = Query(default=None, description="Reorder offers by this field"),
    sort_order: SortOrderEnum = Query(default=SortOrderEnum.asc),
    rate_limit: RateLimitResult = Depends(enforce_rate_limit),
    current_user: CallerIdentity = Depends(get_current_user),
    service: MatchingService = Depends(get_matching_service),
):
    try:
        return await service.match_offers(
            request_data.borrower_id,
            current_user,
            tenure_years=tenure_years,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except MatchingError:
        raise
    except Exception as e:
        logger.error(f"Error matching offers for borrower {request_data.borrower_id}: {e}")
        raise DependencyError(error="Internal server error")

# Public EMI calculator with the standard tenure comparison table
@router.post("/emi", response_model=EmiCalculationResponse, responses=ERROR_RESPONSES)
async def calculate_emi_options(request_data: EmiCalculationRequest):
    years = request_data.tenure_years or settings.DEFAULT_TENURE_YEARS
    try:
        emi = calculate_emi(request_data.principal, request_data.annual_rate_percent, years)
        options = tenure_options(request_data.principal, request_data.annual_rate_percent)
    except (ValueError, ArithmeticError) as e:
        raise InvalidRequestError(error="Invalid EMI parameters", details=str(e))

    return EmiCalculationResponse(
        principal=request_data.principal,
        annual_rate_percent=request_data.annual_rate_percent,
        tenure_years=years,
        emi=emi,
        total_interest=calculate_total_interest(emi, request_data.principal, years),
        total_payment=emi * years * 12,
        tenure_options=options,
    )
