import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum
from typing import List, Optional

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class EmploymentTypeEnum(str, Enum):
    salaried = "salaried"
    self_employed_professional = "self_employed_professional"
    self_employed_business = "self_employed_business"

class ProcessingFeeTypeEnum(str, Enum):
    percentage = "Percentage"
    fixed = "Fixed"

class LenderTypeEnum(str, Enum):
    bank = "Bank"
    nbfc = "NBFC"
    cooperative = "Cooperative"

class OfferSortEnum(str, Enum):
    interest_rate = "interest_rate"
    processing_fee = "processing_fee"
    emi = "emi"

class SortOrderEnum(str, Enum):
    asc = "asc"
    desc = "desc"


class MatchOffersRequest(BaseModel):
    """Request body for the offer matching endpoint."""
    borrower_id: str = Field(..., description="Identifier of the borrower record to match")

    @field_validator("borrower_id")
    @classmethod
    def validate_borrower_id(cls, value: str) -> str:
        value = value.strip().lower()
        if not UUID_PATTERN.match(value):
            raise ValueError("Invalid borrower_id format")
        return value


class EligibleProduct(BaseModel):
    """A candidate product row returned by the eligibility query."""
    model_config = ConfigDict(extra="ignore")

    product_id: str
    lender_id: Optional[str] = None
    lender_name: str
    product_name: str
    interest_rate_min: float = Field(..., ge=0)
    processing_fee_type: ProcessingFeeTypeEnum
    processing_fee_value: float = Field(0, ge=0)
    max_ltv_ratio_tier1: Optional[float] = None
    min_loan_amount: Optional[int] = None
    max_loan_amount: Optional[int] = None
    target_borrower_segment: Optional[List[str]] = None


class Offer(EligibleProduct):
    """An eligible product priced for one borrower."""
    loan_amount: int = Field(..., description="Principal the offer is quoted at")
    estimated_emi: int = Field(..., gt=0, description="Monthly installment over tenure_years")
    tenure_years: int = Field(..., ge=1)
    processing_fee_amount: int = Field(..., ge=0, description="Processing fee in currency units")
    total_interest: int = Field(..., ge=0, description="Interest paid over the full tenure")
    total_cost: int = Field(..., description="All installments plus the processing fee")


class MatchOffersResponse(BaseModel):
    borrower_id: str
    offers: List[Offer]
    count: int
    generated_at: str = Field(..., description="ISO-8601 UTC timestamp")
    user_id: str = Field(..., description="Account that requested the offers")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class TenureOption(BaseModel):
    tenure_years: int
    emi: int
    total_payment: int


class EmiCalculationRequest(BaseModel):
    principal: int = Field(..., ge=0, le=1_000_000_000)
    annual_rate_percent: float = Field(..., ge=0, le=100)
    tenure_years: Optional[int] = Field(None, ge=1, le=30)


class EmiCalculationResponse(BaseModel):
    principal: int
    annual_rate_percent: float
    tenure_years: int
    emi: int
    total_interest: int
    total_payment: int
    tenure_options: List[TenureOption]
