"""FastAPI app entry point for the DriveMatch API."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from drivematch import __version__
from drivematch.api.deps import limiter
from drivematch.api.routes import router
from drivematch.config import get_settings
from drivematch.core.exceptions import DriveMatchError, RepositoryError
from drivematch.core.logging import (
    log_error,
    log_request,
    log_response,
    logger,
    setup_logging,
)

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Starting DriveMatch API...")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="DriveMatch API",
    description="Similar-vehicle ranking and natural-language vehicle search",
    version=__version__,
    lifespan=lifespan,
)

# State for limiter
app.state.limiter = limiter

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    log_error("Rate limit exceeded", client=get_remote_address(request))
    return JSONResponse(
        status_code=429, content={"message": "Rate limit exceeded. Try again later."}
    )


@app.exception_handler(DriveMatchError)
async def drivematch_error_handler(request: Request, exc: DriveMatchError):
    if isinstance(exc, RepositoryError):
        log_error("Repository failure", exc, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    log_request(request.method, request.url.path)

    response = await call_next(request)

    duration_ms = (time.time() - start) * 1000
    log_response(request.method, request.url.path, response.status_code, duration_ms)

    return response


# Routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health():
    return {"status": "ok", "service": "drivematch"}
