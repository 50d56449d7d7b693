# app/loan_product.py

"""
This file acts as a local catalog of lenders, home-loan products and demo borrowers.
The memory data layer matches borrowers against it when the service runs
without a Supabase project (DATA_BACKEND=memory).
"""

LENDERS_CATALOG = [
    {
        "id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f601",
        "name": "State Bank of India",
        "lender_type": "Bank",
        "is_active": True,
        "website": "https://homeloans.sbi",
    },
    {
        "id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f602",
        "name": "HDFC Bank",
        "lender_type": "Bank",
        "is_active": True,
        "website": "https://www.hdfcbank.com",
    },
    {
        "id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f603",
        "name": "Bajaj Housing Finance",
        "lender_type": "NBFC",
        "is_active": True,
    },
    {
        "id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f604",
        "name": "Saraswat Co-operative Bank",
        "lender_type": "Cooperative",
        "is_active": True,
    },
]

LOAN_PRODUCTS_CATALOG = [
    {
        "id": "9a8b7c6d-5e4f-4a3b-9c2d-1e0f9a8b7c01",
        "lender_id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f601",
        "name": "Regular Home Loan",
        "min_loan_amount": 500000,
        "max_loan_amount": 75000000,
        "interest_rate_min": 8.5,
        "processing_fee_type": "Percentage",
        "processing_fee_value": 0.35,
        "max_ltv_ratio_tier1": 90,
        "target_borrower_segment": ["salaried", "self_employed_professional"],
        "min_monthly_income": 25000,
        "is_active": True,
    },
    {
        "id": "9a8b7c6d-5e4f-4a3b-9c2d-1e0f9a8b7c02",
        "lender_id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f602",
        "name": "Home Loan for Salaried",
        "min_loan_amount": 1000000,
        "max_loan_amount": 100000000,
        "interest_rate_min": 8.75,
        "processing_fee_type": "Fixed",
        "processing_fee_value": 3000,
        "max_ltv_ratio_tier1": 80,
        "target_borrower_segment": ["salaried"],
        "min_monthly_income": 30000,
        "is_active": True,
    },
    {
        "id": "9a8b7c6d-5e4f-4a3b-9c2d-1e0f9a8b7c03",
        "lender_id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f603",
        "name": "Home Loan for Self-Employed",
        "min_loan_amount": 1000000,
        "max_loan_amount": 50000000,
        "interest_rate_min": 9.1,
        "processing_fee_type": "Percentage",
        "processing_fee_value": 1.0,
        "max_ltv_ratio_tier1": 75,
        "target_borrower_segment": ["self_employed_professional", "self_employed_business"],
        "is_active": True,
    },
    {
        "id": "9a8b7c6d-5e4f-4a3b-9c2d-1e0f9a8b7c04",
        "lender_id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f604",
        "name": "Griha Nirman Loan",
        "min_loan_amount": 300000,
        "max_loan_amount": 20000000,
        "interest_rate_min": 9.5,
        "processing_fee_type": "Fixed",
        "processing_fee_value": 5000,
        "max_ltv_ratio_tier1": 80,
        "target_borrower_segment": ["salaried", "self_employed_professional", "self_employed_business"],
        "is_active": True,
    },
    # Retired product kept for history; inactive products are never matched
    {
        "id": "9a8b7c6d-5e4f-4a3b-9c2d-1e0f9a8b7c05",
        "lender_id": "6f1d2c3b-4a5e-4f60-8a71-b2c3d4e5f602",
        "name": "Festive Rate Home Loan",
        "min_loan_amount": 1000000,
        "max_loan_amount": 30000000,
        "interest_rate_min": 8.35,
        "processing_fee_type": "Fixed",
        "processing_fee_value": 0,
        "max_ltv_ratio_tier1": 80,
        "target_borrower_segment": ["salaried"],
        "is_active": False,
    },
]

# Demo borrowers for local runs; user_id is the `sub` a caller's token must carry
DEMO_SALARIED_USER_ID = "a11ce000-0000-4000-8000-000000000001"
DEMO_BUSINESS_USER_ID = "b0b00000-0000-4000-8000-000000000002"

BORROWERS_CATALOG = [
    {
        "id": "b0a1c2d3-e4f5-4a6b-8c7d-9e0f1a2b3c01",
        "user_id": DEMO_SALARIED_USER_ID,
        "loan_amount_required": 5000000,
        "employment_type": "salaried",
        "gross_salary": 120000,
        "other_income": 10000,
        "existing_emi": 8000,
        "property_value_est": 8000000,
        "city": "Pune",
    },
    {
        "id": "b0a1c2d3-e4f5-4a6b-8c7d-9e0f1a2b3c02",
        "user_id": DEMO_BUSINESS_USER_ID,
        "loan_amount_required": 3000000,
        "employment_type": "self_employed_business",
        "annual_net_profit": 1800000,
        "property_value_est": 5000000,
        "city": "Surat",
    },
]
