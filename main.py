import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
import uvicorn

from database import check_connection, init_db
from dependencies import registry
from routers import admin_router, events_router, receipts_router
from schemas.error import ErrorDetail, ErrorResponse
from services.errors import RegistryError
from utils.webhook import WEBHOOK_URL, make_webhook_observer

# Load .env
load_dotenv()
REGISTRY_ADMIN = os.getenv("REGISTRY_ADMIN")

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if REGISTRY_ADMIN:
        admin = registry.initialize(REGISTRY_ADMIN)
        logger.info("Receipt registry ready (administrator %s)", admin)
    else:
        logger.warning("REGISTRY_ADMIN is not set; registry stays uninitialized until state exists")
    if WEBHOOK_URL:
        registry.event_bus.subscribe(make_webhook_observer(WEBHOOK_URL))
        logger.info("Forwarding registry events to %s", WEBHOOK_URL)
    yield


# App instance
app = FastAPI(
    title="Receipt Registry",
    description="Soulbound proof-of-payment receipts bound to unique payment references.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
origins = os.getenv("CORS_ORIGINS", "").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, code: str, message: str, details: dict = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details or {}))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, exc: RegistryError):
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = ".".join(str(part) for part in errors[0]["loc"][1:]) if errors else ""
    return _error_response(
        422,
        "VALIDATION_FAILED",
        errors[0]["msg"] if errors else "Invalid request",
        {"field": field},
    )


# 404 fallback for unknown routes
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def generic_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred", {"type": type(exc).__name__})


@app.get("/api/health")
def health():
    database_ok = check_connection()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={"status": "ok" if database_ok else "degraded", "database": database_ok},
    )


app.include_router(receipts_router)
app.include_router(admin_router)
app.include_router(events_router)

if __name__ == "__main__":
    port = int(os.getenv("PORT", 10000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
