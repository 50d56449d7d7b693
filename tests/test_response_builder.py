from app.helpers.response_builder import build_match_response, build_validation_error_body
from app.schemas.user_schemas import CallerIdentity

from tests.helpers import BORROWER_A, FIXED_NOW, USER_A


def test_empty_match_response():
    body = build_match_response(BORROWER_A, [], CallerIdentity(id=USER_A), FIXED_NOW)
    assert body == {
        "borrower_id": BORROWER_A,
        "offers": [],
        "count": 0,
        "generated_at": "2026-10-19T09:30:00+00:00",
        "user_id": USER_A,
    }


def test_missing_borrower_id_message():
    body = build_validation_error_body([
        {"type": "missing", "loc": ("body", "borrower_id"), "msg": "Field required"},
    ])
    assert body == {"error": "Valid borrower_id is required", "details": "body.borrower_id: Field required"}


def test_malformed_borrower_id_message():
    body = build_validation_error_body([
        {"type": "value_error", "loc": ("body", "borrower_id"), "msg": "Value error, Invalid borrower_id format"},
    ])
    assert body["error"] == "Invalid borrower_id format"


def test_other_fields_get_generic_message():
    body = build_validation_error_body([
        {"type": "greater_than_equal", "loc": ("query", "tenure_years"), "msg": "Input should be >= 1"},
    ])
    assert body["error"] == "Request validation failed"
    assert "query.tenure_years" in body["details"]


def test_invalid_json_wins():
    body = build_validation_error_body([
        {"type": "json_invalid", "loc": ("body", 1), "msg": "JSON decode error"},
    ])
    assert body["error"] == "Invalid JSON in request body"
