from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from app.schemas.offer_schema import EmploymentTypeEnum, LenderTypeEnum, ProcessingFeeTypeEnum


class Lender(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Lender identifier")
    name: str = Field(..., description="Display name")
    lender_type: LenderTypeEnum = Field(..., description="Bank, NBFC or cooperative")
    is_active: bool = Field(default=True, description="Inactive lenders are never offered")
    website: Optional[str] = Field(None, description="Public website")

    class Settings:
        name = "lenders"


class Product(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Product identifier")
    lender_id: str = Field(..., description="Owning lender")
    name: str = Field(..., description="Display name of the product")
    min_loan_amount: int = Field(..., ge=0, description="Smallest principal the product lends")
    max_loan_amount: int = Field(..., ge=0, description="Largest principal the product lends")
    interest_rate_min: float = Field(..., ge=0, description="Lowest advertised annual rate, in percent")
    processing_fee_type: ProcessingFeeTypeEnum = Field(..., description="Percentage of principal or a fixed amount")
    processing_fee_value: float = Field(0, ge=0, description="Fee percentage or amount, depending on processing_fee_type")
    max_ltv_ratio_tier1: Optional[float] = Field(None, ge=0, le=100, description="Maximum loan-to-value, in percent")
    target_borrower_segment: List[EmploymentTypeEnum] = Field(default_factory=list, description="Employment types the product is offered to")
    min_monthly_income: Optional[float] = Field(None, ge=0, description="Minimum net monthly income, if the product sets one")
    is_active: bool = Field(default=True, description="Inactive products are never offered")

    class Settings:
        name = "products"
