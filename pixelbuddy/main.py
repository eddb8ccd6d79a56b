import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from pixelbuddy.db import create_tables, engine, health_check
from pixelbuddy.exceptions import PixelBuddyError
from pixelbuddy.load_secrets import cors_origin
from pixelbuddy.models.dc_models import HealthModel
from pixelbuddy.routers import pet

logging.basicConfig(level=logging.INFO)
started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app):
    """Create the tables before serving requests.
    This function is called to start the server.
    """
    await create_tables()
    logging.info("Start Server")
    try:
        yield
    finally:
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(title="pixelbuddy", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[cors_origin],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = pet.limiter
app.include_router(pet.pet_router)


@app.exception_handler(PixelBuddyError)
async def pixelbuddy_error_handler(request: Request, exc: PixelBuddyError):
    if exc.status_code >= 500:
        logging.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_error_handler(request: Request, exc: RateLimitExceeded):
    logging.warning(f"Rate limit hit on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={"error": "RateLimitExceeded", "message": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "ValidationError", "message": message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logging.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "InternalServerError", "message": "Internal server error"},
    )


@app.get("/health", response_model=HealthModel)
async def health():
    db_health = await health_check()
    if not db_health["healthy"]:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected", "error": db_health["error"]},
        )
    return HealthModel(
        status="healthy",
        database="connected",
        timestamp=db_health["timestamp"],
        uptime=time.monotonic() - started_at,
    )
