from app.database.data_layer import InMemoryDataLayer
from app.services.matching_service import MatchingService

from tests.helpers import (
    BORROWER_A,
    BORROWER_A_NO_OFFERS,
    BORROWER_B,
    BORROWER_B_CITY,
    TEST_JWT_SECRET,
    USER_A,
    USER_B,
    auth_headers,
)

MATCH_URL = "/offers/match"


def test_match_offers_success(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(USER_A))

    assert response.status_code == 200
    body = response.json()
    assert body["borrower_id"] == BORROWER_A
    assert body["user_id"] == USER_A
    assert body["count"] == 2
    assert [o["product_id"] for o in body["offers"]] == [
        "aaaa0002-0000-4000-8000-000000000002",
        "aaaa0001-0000-4000-8000-000000000001",
    ]
    assert body["offers"][0]["lender_name"] == "LIC Housing Finance"
    assert response.headers["X-Rate-Limit"] == "10"
    assert response.headers["X-Rate-Limit-Remaining"] == "9"
    assert "X-Rate-Limit-Reset" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_match_offers_accepts_uppercase_and_padded_id(client):
    response = client.post(MATCH_URL, json={"borrower_id": f"  {BORROWER_A.upper()}  "},
                           headers=auth_headers(USER_A))
    assert response.status_code == 200
    assert response.json()["borrower_id"] == BORROWER_A


def test_match_offers_with_query_options(client):
    response = client.post(
        f"{MATCH_URL}?tenure_years=15&sort_by=emi&sort_order=desc",
        json={"borrower_id": BORROWER_A},
        headers=auth_headers(USER_A),
    )

    assert response.status_code == 200
    offers = response.json()["offers"]
    assert {o["tenure_years"] for o in offers} == {15}
    emis = [o["estimated_emi"] for o in offers]
    assert emis == sorted(emis, reverse=True)


def test_missing_authorization_header(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A})

    assert response.status_code == 401
    assert response.json() == {"error": "Authorization header required"}
    assert response.headers["X-Rate-Limit-Remaining"] == "9"


def test_malformed_authorization_header(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers={"Authorization": "Token abc"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_token_signed_with_wrong_secret(client):
    headers = auth_headers(USER_A, secret="not-" + TEST_JWT_SECRET)
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=headers)
    assert response.status_code == 401


def test_expired_token(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(USER_A, expires_in=-60))
    assert response.status_code == 401


def test_token_without_subject(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(None))
    assert response.status_code == 401


def test_other_users_borrower_is_forbidden(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_B}, headers=auth_headers(USER_A))

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized access to borrower data"}
    assert BORROWER_B_CITY not in response.text
    assert "X-Rate-Limit" in response.headers


def test_owner_can_read_their_own_borrower(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_B}, headers=auth_headers(USER_B))
    assert response.status_code == 200
    assert response.json()["user_id"] == USER_B


def test_missing_borrower_id(client):
    response = client.post(MATCH_URL, json={}, headers=auth_headers(USER_A))
    assert response.status_code == 400
    assert response.json()["error"] == "Valid borrower_id is required"


def test_borrower_id_not_a_uuid(client):
    response = client.post(MATCH_URL, json={"borrower_id": "1; drop table borrowers"}, headers=auth_headers(USER_A))
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid borrower_id format"


def test_invalid_json_body(client):
    headers = {**auth_headers(USER_A), "Content-Type": "application/json"}
    response = client.post(MATCH_URL, content="{not json", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON in request body"


def test_no_matching_products_is_success(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A_NO_OFFERS}, headers=auth_headers(USER_A))
    assert response.status_code == 200
    assert response.json()["offers"] == []
    assert response.json()["count"] == 0


def test_data_layer_failure_returns_generic_error(client, borrowers, products, lenders):
    from app.main import app
    from app.api.offer_routes import get_matching_service

    class BrokenDataLayer(InMemoryDataLayer):
        async def match_eligible_products(self, borrower_id):
            raise RuntimeError("relation \"products\" does not exist")

    service = MatchingService(BrokenDataLayer(borrowers, products, lenders), timeout_seconds=1.0)
    app.dependency_overrides[get_matching_service] = lambda: service

    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(USER_A))

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch offers"}
    assert "relation" not in response.text


def test_rate_limit_exceeded(client):
    for _ in range(10):
        response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(USER_A))
        assert response.status_code == 200

    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(USER_A))

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded", "details": "Too many requests. Please try again later."}
    assert response.headers["X-Rate-Limit-Remaining"] == "0"


def test_rate_limit_is_per_client(client):
    for _ in range(10):
        client.post(MATCH_URL, json={"borrower_id": BORROWER_A},
                    headers={**auth_headers(USER_A), "X-Forwarded-For": "203.0.113.7"})

    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A},
                           headers={**auth_headers(USER_A), "X-Forwarded-For": "198.51.100.2"})
    assert response.status_code == 200


def test_cors_preflight(client):
    response = client.options(MATCH_URL, headers={
        "Origin": "https://app.example.com",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "authorization, content-type",
    })

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_cors_headers_on_actual_request(client):
    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A},
                           headers={**auth_headers(USER_A), "Origin": "https://app.example.com"})
    assert response.headers["access-control-allow-origin"] == "*"
    assert "X-Rate-Limit" in response.headers["access-control-expose-headers"]


def test_service_unavailable_when_not_initialized(client, monkeypatch):
    from app.main import app

    app.dependency_overrides = {}
    monkeypatch.setattr("app.api.offer_routes.matching_service", None)

    response = client.post(MATCH_URL, json={"borrower_id": BORROWER_A}, headers=auth_headers(USER_A))

    assert response.status_code == 503
    assert "not initialized" in response.json()["error"]


def test_emi_calculator(client):
    response = client.post("/offers/emi", json={"principal": 5_000_000, "annual_rate_percent": 8.5})

    assert response.status_code == 200
    body = response.json()
    assert body["tenure_years"] == 20
    assert abs(body["emi"] - 43_391) <= 1
    assert body["total_payment"] == body["emi"] * 240
    assert [o["tenure_years"] for o in body["tenure_options"]] == [10, 15, 20, 25, 30]


def test_emi_calculator_with_tiny_rate(client):
    response = client.post("/offers/emi", json={"principal": 1_000_000, "annual_rate_percent": 1e-15})

    assert response.status_code == 200
    assert abs(response.json()["emi"] - 4_167) <= 1


def test_emi_calculator_tenure_capped_at_thirty_years(client):
    response = client.post("/offers/emi", json={"principal": 1_000_000, "annual_rate_percent": 8.5,
                                                "tenure_years": 35})
    assert response.status_code == 400

    response = client.post("/offers/emi", json={"principal": 1_000_000, "annual_rate_percent": 8.5,
                                                "tenure_years": 30})
    assert response.status_code == 200


def test_emi_calculator_rejects_negative_rate(client):
    response = client.post("/offers/emi", json={"principal": 5_000_000, "annual_rate_percent": -1})
    assert response.status_code == 400


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["data_backend"] == "memory"


def test_bundled_catalog_serves_demo_borrowers(client):
    from app.main import app
    from app.loan_product import BORROWERS_CATALOG, DEMO_BUSINESS_USER_ID, DEMO_SALARIED_USER_ID

    # No service override: the module-level service built from DATA_BACKEND=memory
    app.dependency_overrides = {}
    salaried_id, business_id = BORROWERS_CATALOG[0]["id"], BORROWERS_CATALOG[1]["id"]

    response = client.post(MATCH_URL, json={"borrower_id": salaried_id}, headers=auth_headers(DEMO_SALARIED_USER_ID))
    assert response.status_code == 200
    assert [o["product_name"] for o in response.json()["offers"]] == [
        "Regular Home Loan",
        "Home Loan for Salaried",
        "Griha Nirman Loan",
    ]

    response = client.post(MATCH_URL, json={"borrower_id": business_id}, headers=auth_headers(DEMO_BUSINESS_USER_ID))
    assert response.status_code == 200
    assert [o["product_name"] for o in response.json()["offers"]] == [
        "Home Loan for Self-Employed",
        "Griha Nirman Loan",
    ]

    response = client.post(MATCH_URL, json={"borrower_id": business_id}, headers=auth_headers(DEMO_SALARIED_USER_ID))
    assert response.status_code == 403
