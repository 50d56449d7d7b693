import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

from pydantic import ValidationError
from supabase import Client

from app.core.config import settings
from app.core.exceptions import DependencyError
from app.core.supabase_client import get_supabase_client
from app.database.models import Borrower, Lender, Product
from app.loan_product import BORROWERS_CATALOG, LENDERS_CATALOG, LOAN_PRODUCTS_CATALOG
from app.schemas.offer_schema import EligibleProduct
from app.services.eligibility_service import EligibilityService, eligibility_service, order_candidates

logger = logging.getLogger(__name__)

MATCH_PRODUCTS_RPC = "match_products"


class DataLayer(Protocol):
    """Read-only view of borrowers and the product catalog."""

    async def get_borrower_owner(self, borrower_id: str) -> Optional[str]:
        ...

    async def fetch_borrower(self, borrower_id: str, user_id: str) -> Optional[Borrower]:
        ...

    async def match_eligible_products(self, borrower_id: str) -> List[EligibleProduct]:
        ...


def _parse_borrower(row: Dict[str, Any]) -> Borrower:
    try:
        return Borrower.model_validate(row)
    except ValidationError as e:
        logger.error(f"Borrower row {row.get('id')} failed validation: {e}")
        raise DependencyError(error="Invalid borrower data") from e


def _parse_candidates(rows: Iterable[Dict[str, Any]]) -> List[EligibleProduct]:
    candidates = []
    for row in rows:
        try:
            candidates.append(EligibleProduct.model_validate(row))
        except ValidationError as e:
            logger.error(f"Product row {row.get('product_id')} failed validation: {e}")
            raise DependencyError() from e
    return candidates


class SupabaseDataLayer:
    """Reads borrowers from Postgres and delegates eligibility to `match_products`.

    The supabase client is synchronous, so each query runs in a worker thread.
    """

    def __init__(self, client: Client):
        self._client = client

    async def get_borrower_owner(self, borrower_id: str) -> Optional[str]:
        rows = await asyncio.to_thread(self._select_owner, borrower_id)
        if not rows:
            return None
        return str(rows[0].get("user_id")) if rows[0].get("user_id") else None

    async def fetch_borrower(self, borrower_id: str, user_id: str) -> Optional[Borrower]:
        rows = await asyncio.to_thread(self._select_borrower, borrower_id, user_id)
        if not rows:
            return None
        return _parse_borrower(rows[0])

    async def match_eligible_products(self, borrower_id: str) -> List[EligibleProduct]:
        rows = await asyncio.to_thread(self._call_match_products, borrower_id)
        candidates = _parse_candidates(rows or [])
        logger.info(f"{MATCH_PRODUCTS_RPC} returned {len(candidates)} products for borrower {borrower_id}")
        return order_candidates(candidates)

    def _select_owner(self, borrower_id: str) -> List[Dict[str, Any]]:
        response = (
            self._client.table(Borrower.Settings.name)
            .select("id, user_id")
            .eq("id", borrower_id)
            .limit(1)
            .execute()
        )
        return response.data or []

    def _select_borrower(self, borrower_id: str, user_id: str) -> List[Dict[str, Any]]:
        response = (
            self._client.table(Borrower.Settings.name)
            .select("*")
            .eq("id", borrower_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return response.data or []

    def _call_match_products(self, borrower_id: str) -> List[Dict[str, Any]]:
        response = self._client.rpc(MATCH_PRODUCTS_RPC, {"input_borrower_id": borrower_id}).execute()
        return response.data or []


class InMemoryDataLayer:
    """Borrowers and catalog held in process memory, filtered in-process."""

    def __init__(
        self,
        borrowers: Iterable[Borrower] = (),
        products: Iterable[Product] = (),
        lenders: Iterable[Lender] = (),
        eligibility: EligibilityService = eligibility_service,
    ):
        self._borrowers: Dict[str, Borrower] = {b.id: b for b in borrowers}
        self._products: List[Product] = list(products)
        self._lenders: Dict[str, Lender] = {lender.id: lender for lender in lenders}
        self._eligibility = eligibility

    @classmethod
    def from_catalog(cls) -> "InMemoryDataLayer":
        layer = cls(
            borrowers=[Borrower(**b) for b in BORROWERS_CATALOG],
            products=[Product(**p) for p in LOAN_PRODUCTS_CATALOG],
            lenders=[Lender(**lender) for lender in LENDERS_CATALOG],
        )
        logger.info(f"Loaded catalog: {len(layer._borrowers)} borrowers, "
                    f"{len(layer._products)} products, {len(layer._lenders)} lenders")
        return layer

    async def get_borrower_owner(self, borrower_id: str) -> Optional[str]:
        borrower = self._borrowers.get(borrower_id)
        return borrower.user_id if borrower else None

    async def fetch_borrower(self, borrower_id: str, user_id: str) -> Optional[Borrower]:
        borrower = self._borrowers.get(borrower_id)
        if borrower is None or borrower.user_id != user_id:
            return None
        return borrower

    async def match_eligible_products(self, borrower_id: str) -> List[EligibleProduct]:
        borrower = self._borrowers.get(borrower_id)
        if borrower is None:
            return []
        return self._eligibility.filter_eligible_products(borrower, self._products, self._lenders)


# Build the data layer selected by DATA_BACKEND
def initialize_data_layer() -> Optional[DataLayer]:
    try:
        if settings.DATA_BACKEND == "memory":
            layer = InMemoryDataLayer.from_catalog()
        elif settings.DATA_BACKEND == "supabase":
            layer = SupabaseDataLayer(get_supabase_client())
        else:
            raise RuntimeError(f"Unknown DATA_BACKEND: {settings.DATA_BACKEND}")
        logger.info(f"Data layer initialized ({settings.DATA_BACKEND})")
        return layer
    except Exception as e:
        logger.error(f"Failed to initialize data layer: {e}")
        return None
