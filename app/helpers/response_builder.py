from datetime import datetime
from typing import Any, Dict, List, Sequence

from app.schemas.offer_schema import Offer
from app.schemas.user_schemas import CallerIdentity


def build_match_response(
    borrower_id: str,
    offers: List[Offer],
    caller: CallerIdentity,
    generated_at: datetime,
) -> Dict[str, Any]:
    offer_dicts = [offer.model_dump(mode="json") for offer in offers]
    return {
        "borrower_id": borrower_id,
        "offers": offer_dicts,
        "count": len(offer_dicts),
        "generated_at": generated_at.isoformat(),
        "user_id": caller.id,
    }


def build_validation_error_body(errors: Sequence[Dict[str, Any]]) -> Dict[str, str]:
    """Summarize pydantic request errors without echoing submitted values."""
    error = "Request validation failed"
    for err in errors:
        loc = tuple(err.get("loc", ()))
        err_type = err.get("type", "")
        if err_type == "json_invalid":
            error = "Invalid JSON in request body"
            break
        if loc[:1] == ("body",) and (len(loc) == 1 or loc[1] == "borrower_id"):
            error = "Invalid borrower_id format" if err_type == "value_error" else "Valid borrower_id is required"
            break

    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in errors
    )
    body = {"error": error}
    if details:
        body["details"] = details
    return body
