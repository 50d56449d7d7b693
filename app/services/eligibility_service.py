import logging
from typing import Dict, Iterable, List, Optional

from app.database.models import Borrower, Lender, Product
from app.schemas.offer_schema import EligibleProduct

logger = logging.getLogger(__name__)


# Stable ordering for candidate lists: cheapest advertised rate first
def candidate_sort_key(product: EligibleProduct):
    return (product.interest_rate_min, product.product_id)


def order_candidates(products: Iterable[EligibleProduct]) -> List[EligibleProduct]:
    return sorted(products, key=candidate_sort_key)


class EligibilityService:
    """Applies the product eligibility rules to one borrower.

    The hosted `match_products` procedure enforces the same rules
    server-side; this is the in-process equivalent used by the memory
    data layer.
    """

    def filter_eligible_products(
        self,
        borrower: Borrower,
        products: Iterable[Product],
        lenders: Dict[str, Lender],
    ) -> List[EligibleProduct]:
        products = list(products)
        logger.info(f"Starting product filtering with {len(products)} available products")
        logger.debug(f"Borrower {borrower.id}: amount={borrower.loan_amount_required}, "
                     f"employment={borrower.employment_type.value}")

        eligible = []
        for product in products:
            lender = lenders.get(product.lender_id)
            reason = self.ineligibility_reason(borrower, product, lender)
            if reason:
                logger.debug(f"Product {product.name} not eligible: {reason}")
                continue
            eligible.append(self._to_candidate(product, lender))

        logger.info(f"Found {len(eligible)} eligible products")
        return order_candidates(eligible)

    def is_eligible(self, borrower: Borrower, product: Product, lender: Optional[Lender]) -> bool:
        return self.ineligibility_reason(borrower, product, lender) is None

    # Returns a short description of the first failed rule, or None when eligible
    def ineligibility_reason(self, borrower: Borrower, product: Product, lender: Optional[Lender]) -> Optional[str]:
        if not product.is_active:
            return "product inactive"
        if lender is None or not lender.is_active:
            return "lender inactive or missing"
        if not self._check_loan_amount(product, borrower.loan_amount_required):
            return (f"amount {borrower.loan_amount_required} outside "
                    f"[{product.min_loan_amount}, {product.max_loan_amount}]")
        if not self._check_segment(product, borrower):
            return f"segment {borrower.employment_type.value} not targeted"
        if not self._check_income(product, borrower):
            return f"monthly income below {product.min_monthly_income}"
        if not self._check_ltv(product, borrower):
            return f"loan-to-value above {product.max_ltv_ratio_tier1}%"
        return None

    def _check_loan_amount(self, product: Product, loan_amount: int) -> bool:
        return product.min_loan_amount <= loan_amount <= product.max_loan_amount

    def _check_segment(self, product: Product, borrower: Borrower) -> bool:
        return borrower.employment_type in product.target_borrower_segment

    def _check_income(self, product: Product, borrower: Borrower) -> bool:
        if product.min_monthly_income is None:
            return True
        monthly_income = borrower.monthly_income
        if monthly_income is None:
            return False
        return monthly_income >= product.min_monthly_income

    def _check_ltv(self, product: Product, borrower: Borrower) -> bool:
        # Without a property estimate there is nothing to compare against
        if product.max_ltv_ratio_tier1 is None or not borrower.property_value_est:
            return True
        ltv = borrower.loan_amount_required / borrower.property_value_est * 100
        return ltv <= product.max_ltv_ratio_tier1

    def _to_candidate(self, product: Product, lender: Lender) -> EligibleProduct:
        return EligibleProduct(
            product_id=product.id,
            lender_id=lender.id,
            lender_name=lender.name,
            product_name=product.name,
            interest_rate_min=product.interest_rate_min,
            processing_fee_type=product.processing_fee_type,
            processing_fee_value=product.processing_fee_value,
            max_ltv_ratio_tier1=product.max_ltv_ratio_tier1,
            min_loan_amount=product.min_loan_amount,
            max_loan_amount=product.max_loan_amount,
            target_borrower_segment=[s.value for s in product.target_borrower_segment],
        )


eligibility_service = EligibilityService()
