from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from app.schemas.offer_schema import EmploymentTypeEnum


class Borrower(BaseModel):
    """Row of the `borrowers` table, limited to the columns matching reads."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Borrower identifier")
    user_id: str = Field(..., description="Account that owns this borrower record")
    loan_amount_required: int = Field(..., ge=0, description="Requested principal")
    employment_type: EmploymentTypeEnum = Field(..., description="Employment category used for segment matching")
    gross_salary: Optional[float] = Field(None, ge=0, description="Gross monthly salary (salaried borrowers)")
    annual_net_profit: Optional[float] = Field(None, ge=0, description="Annual net profit (self-employed borrowers)")
    other_income: Optional[float] = Field(None, ge=0, description="Other monthly income")
    existing_emi: Optional[float] = Field(None, ge=0, description="Existing monthly debt obligation")
    property_value_est: Optional[float] = Field(None, ge=0, description="Estimated value of the property being financed")
    city: Optional[str] = Field(None, description="City of the property")

    class Settings:
        name = "borrowers"  # Table name in Postgres

    @property
    def monthly_income(self) -> Optional[float]:
        """Monthly income from whichever figure the onboarding flow collected."""
        if self.gross_salary is not None:
            return self.gross_salary + (self.other_income or 0)
        if self.annual_net_profit is not None:
            return self.annual_net_profit / 12
        return None
