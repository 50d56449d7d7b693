from app.schemas.offer_schema import (
    EligibleProduct,
    EmploymentTypeEnum,
    ErrorResponse,
    LenderTypeEnum,
    MatchOffersRequest,
    MatchOffersResponse,
    Offer,
    ProcessingFeeTypeEnum,
)
from app.schemas.user_schemas import CallerIdentity
