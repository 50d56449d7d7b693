import logging
from typing import Iterable, List, Optional

from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import OfferPricingError
from app.schemas.offer_schema import EligibleProduct, Offer, OfferSortEnum, SortOrderEnum
from app.services.emi_service import (
    calculate_emi,
    calculate_processing_fee,
    calculate_total_interest,
)

logger = logging.getLogger(__name__)

_SORT_FIELDS = {
    OfferSortEnum.interest_rate: "interest_rate_min",
    OfferSortEnum.processing_fee: "processing_fee_amount",
    OfferSortEnum.emi: "estimated_emi",
}


class OfferService:
    """Prices eligible products into offers for a single borrower."""

    # Map each eligible product to an offer quoted at the borrower's requested principal
    def assemble_offers(
        self,
        products: Iterable[EligibleProduct],
        loan_amount: int,
        tenure_years: Optional[int] = None,
    ) -> List[Offer]:
        tenure_years = tenure_years or settings.DEFAULT_TENURE_YEARS
        offers = [self._build_offer(product, loan_amount, tenure_years) for product in products]
        logger.info(f"Assembled {len(offers)} offers at principal {loan_amount} over {tenure_years} years")
        return offers

    def _build_offer(self, product: EligibleProduct, loan_amount: int, tenure_years: int) -> Offer:
        try:
            # Quoted at the minimum advertised rate; risk-based pricing is not modelled
            emi = calculate_emi(loan_amount, product.interest_rate_min, tenure_years)
            processing_fee = calculate_processing_fee(
                loan_amount, product.processing_fee_type, product.processing_fee_value
            )
        except (ValueError, ArithmeticError) as e:
            logger.error(f"Could not price product {product.product_id}: {e}")
            raise OfferPricingError() from e

        if emi <= 0:
            logger.error(f"Product {product.product_id} priced at non-positive EMI {emi} "
                         f"(principal={loan_amount}, rate={product.interest_rate_min})")
            raise OfferPricingError()

        try:
            return Offer(
                **product.model_dump(),
                loan_amount=loan_amount,
                estimated_emi=emi,
                tenure_years=tenure_years,
                processing_fee_amount=processing_fee,
                total_interest=calculate_total_interest(emi, loan_amount, tenure_years),
                total_cost=emi * tenure_years * 12 + processing_fee,
            )
        except ValidationError as e:
            logger.error(f"Offer for product {product.product_id} failed validation: {e}")
            raise OfferPricingError() from e

    # Reorder offers for display; ties keep their incoming order
    def sort_offers(
        self,
        offers: List[Offer],
        sort_by: Optional[OfferSortEnum] = None,
        sort_order: SortOrderEnum = SortOrderEnum.asc,
    ) -> List[Offer]:
        if sort_by is None:
            return list(offers)
        field = _SORT_FIELDS[OfferSortEnum(sort_by)]
        return sorted(
            offers,
            key=lambda offer: getattr(offer, field),
            reverse=SortOrderEnum(sort_order) == SortOrderEnum.desc,
        )


offer_service = OfferService()
