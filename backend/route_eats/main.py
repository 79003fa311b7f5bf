"""Route Eats API server.

Run with ``uvicorn route_eats.main:app``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from route_eats import config
from route_eats.api import router
from route_eats.api.routes import app_error_for, close_services
from route_eats.exceptions import RouteEatsError
from route_eats.models import AppError, ErrorCode

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_services()


app = FastAPI(
    title="Route Eats API",
    description="Restaurants spread along a driving route",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error.model_dump(mode="json")},
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return _error_response(422, AppError(
        code=ErrorCode.VALIDATION_ERROR,
        message=str(exc),
        user_message="Invalid request format. Please check your input.",
    ))


@app.exception_handler(RouteEatsError)
async def route_eats_exception_handler(request: Request, exc: RouteEatsError):
    """Errors raised while building services, before a route handler runs."""
    logger.warning(f"[API] {request.url.path}: {exc}")
    return _error_response(503, app_error_for(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"[API] Unhandled error on {request.url.path}")
    return _error_response(500, AppError(
        code=ErrorCode.API_ERROR,
        message=str(exc),
        user_message="Something went wrong. Please try again.",
    ))


app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
