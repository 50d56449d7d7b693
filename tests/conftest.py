import os

# Configure the app for local JWT verification and the in-memory catalog
# before anything under app/ reads the environment.
os.environ["IDENTITY_BACKEND"] = "jwt"
os.environ["DATA_BACKEND"] = "memory"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-for-offer-matching"
os.environ["CORS_ALLOW_ORIGINS"] = "*"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "10"
os.environ["RATE_LIMIT_WINDOW_SECONDS"] = "60"

import pytest
from fastapi.testclient import TestClient

from app.database.data_layer import InMemoryDataLayer
from app.database.models import Lender

from tests.helpers import (
    BORROWER_A_NO_OFFERS,
    BORROWER_B,
    BORROWER_B_CITY,
    FIXED_NOW,
    LENDER_BANK,
    LENDER_INACTIVE,
    LENDER_NBFC,
    USER_A,
    USER_B,
    make_borrower,
    make_product,
)


@pytest.fixture
def lenders():
    return [
        Lender(id=LENDER_BANK, name="Canara Bank", lender_type="Bank"),
        Lender(id=LENDER_NBFC, name="LIC Housing Finance", lender_type="NBFC"),
        Lender(id=LENDER_INACTIVE, name="Dormant Credit Society", lender_type="Cooperative", is_active=False),
    ]


@pytest.fixture
def products():
    return [
        make_product("aaaa0001-0000-4000-8000-000000000001", name="Salaried Saver",
                     interest_rate_min=8.75, target_borrower_segment=["salaried"],
                     processing_fee_type="Fixed", processing_fee_value=3000),
        make_product("aaaa0002-0000-4000-8000-000000000002", name="Everyone Home Loan",
                     lender_id=LENDER_NBFC, interest_rate_min=8.5),
        make_product("aaaa0003-0000-4000-8000-000000000003", name="Business Builder",
                     interest_rate_min=9.25, target_borrower_segment=["self_employed_business"]),
        make_product("aaaa0004-0000-4000-8000-000000000004", name="Retired Product",
                     interest_rate_min=7.0, is_active=False),
        make_product("aaaa0005-0000-4000-8000-000000000005", name="Dormant Lender Loan",
                     lender_id=LENDER_INACTIVE, interest_rate_min=7.5),
    ]


@pytest.fixture
def borrowers():
    return [
        make_borrower(),
        make_borrower(BORROWER_A_NO_OFFERS, USER_A, loan_amount_required=90_000_000, property_value_est=None),
        make_borrower(BORROWER_B, USER_B, loan_amount_required=3_000_000,
                      employment_type="self_employed_business", gross_salary=None,
                      annual_net_profit=2_400_000, city=BORROWER_B_CITY),
    ]


@pytest.fixture
def data_layer(borrowers, products, lenders):
    return InMemoryDataLayer(borrowers=borrowers, products=products, lenders=lenders)


@pytest.fixture
def matching_service(data_layer):
    from app.services.matching_service import MatchingService
    return MatchingService(data_layer, timeout_seconds=1.0, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(matching_service):
    from app.main import app
    from app.api.offer_routes import get_matching_service
    from app.core.rate_limiter import get_rate_limiter

    get_rate_limiter().reset()
    app.dependency_overrides = {}
    app.dependency_overrides[get_matching_service] = lambda: matching_service

    yield TestClient(app)

    app.dependency_overrides = {}
    get_rate_limiter().reset()
