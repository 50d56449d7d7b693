import time
from datetime import datetime, timezone

from jose import jwt

from app.database.models import Borrower, Product

TEST_JWT_SECRET = "test-jwt-secret-for-offer-matching"

USER_A = "0b5c7d2e-1f3a-4b6c-8d9e-0a1b2c3d4e5f"
USER_B = "7e6d5c4b-3a29-4187-b6a5-f4e3d2c1b0a9"
BORROWER_A = "3f1c2a4e-8b7d-4c6e-9a1b-2d3e4f5a6b7c"
BORROWER_A_NO_OFFERS = "5d2e3f4a-6b7c-4d8e-8f9a-0b1c2d3e4f5a"
BORROWER_B = "c4d5e6f7-a8b9-4c0d-a1e2-f3a4b5c6d7e8"
BORROWER_B_CITY = "Visakhapatnam"
UNKNOWN_BORROWER = "9e8d7c6b-5a4f-4e3d-9c2b-1a0f9e8d7c6b"

LENDER_BANK = "11111111-1111-4111-8111-111111111111"
LENDER_NBFC = "22222222-2222-4222-8222-222222222222"
LENDER_INACTIVE = "33333333-3333-4333-8333-333333333333"

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def make_token(sub=USER_A, secret=TEST_JWT_SECRET, expires_in=3600, audience="authenticated", **claims):
    payload = {"aud": audience, "exp": int(time.time()) + expires_in, "role": "authenticated", **claims}
    if sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(sub=USER_A, **kwargs):
    return {"Authorization": f"Bearer {make_token(sub, **kwargs)}"}


def make_product(product_id, **overrides):
    fields = {
        "id": product_id,
        "lender_id": LENDER_BANK,
        "name": f"Product {product_id[:4]}",
        "min_loan_amount": 1_000_000,
        "max_loan_amount": 5_000_000,
        "interest_rate_min": 8.5,
        "processing_fee_type": "Percentage",
        "processing_fee_value": 0.5,
        "max_ltv_ratio_tier1": 80,
        "target_borrower_segment": ["salaried", "self_employed_professional", "self_employed_business"],
        "is_active": True,
    }
    fields.update(overrides)
    return Product(**fields)


def make_borrower(borrower_id=BORROWER_A, user_id=USER_A, **overrides):
    fields = {
        "id": borrower_id,
        "user_id": user_id,
        "loan_amount_required": 5_000_000,
        "employment_type": "salaried",
        "gross_salary": 150_000,
        "property_value_est": 8_000_000,
        "city": "Bengaluru",
    }
    fields.update(overrides)
    return Borrower(**fields)
