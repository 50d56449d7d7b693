from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.requests import Request
from contextlib import asynccontextmanager
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
import logging
import traceback

from app.api.offer_routes import router as offer_router
from app.core.config import settings
from app.core.exceptions import MatchingError
from app.core.identity import identity_provider
from app.core.rate_limiter import RATE_LIMIT_HEADER, RATE_LIMIT_REMAINING_HEADER, RATE_LIMIT_RESET_HEADER
from app.helpers.response_builder import build_validation_error_body
from app.services.matching_service import matching_service

logger = logging.getLogger("server_exception_handler")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds defensive headers to every non-preflight API response.

    OPTIONS requests are left alone so CORSMiddleware can answer them with
    its own Access-Control-* headers.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} "
                f"(identity={settings.IDENTITY_BACKEND}, data={settings.DATA_BACKEND})")
    if identity_provider is None:
        logger.warning("Identity provider unavailable; /offers/match will answer 503")
    if matching_service is None:
        logger.warning("Matching service unavailable; /offers/match will answer 503")
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Matches borrowers to eligible loan products and prices each offer",
    version="1.0.0",
    lifespan=lifespan
)


def _rate_limit_headers(request: Request) -> dict:
    result = getattr(request.state, "rate_limit", None)
    return result.headers() if result is not None else {}


@app.exception_handler(MatchingError)
async def matching_exception_handler(request: Request, exc: MatchingError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.error}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.error}")
    headers = {**_rate_limit_headers(request), **exc.headers}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTPException handled: {exc.detail}")
    headers = {**_rate_limit_headers(request), **(exc.headers or {})}
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = build_validation_error_body(exc.errors())
    logger.warning(f"Validation error on {request.url.path}: {body.get('details')}")
    return JSONResponse(status_code=400, content=body, headers=_rate_limit_headers(request))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Details stay in the log; the caller only gets a generic message
    tb = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Middleware runs last-added-first, so CORS is added last to answer preflights first
app.add_middleware(SecurityHeadersMiddleware)

allowed_origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    # Browsers reject credentialed responses with a wildcard origin
    allow_credentials="*" not in allowed_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    expose_headers=[RATE_LIMIT_HEADER, RATE_LIMIT_REMAINING_HEADER, RATE_LIMIT_RESET_HEADER],
    max_age=3600,
)

app.include_router(offer_router)

@app.get("/")
async def root():
    return {"message": "Loan offer matching API is running!"}

@app.get("/health")
async def health_check():
    return {
        "status": "healthy" if matching_service and identity_provider else "degraded",
        "identity_backend": settings.IDENTITY_BACKEND,
        "data_backend": settings.DATA_BACKEND,
    }
