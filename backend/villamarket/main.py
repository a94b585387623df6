"""VillaMarket — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from villamarket.api.v1.amenities import router as amenities_router
from villamarket.api.v1.auth import router as auth_router
from villamarket.api.v1.availability import router as availability_router
from villamarket.api.v1.bookings import router as bookings_router
from villamarket.api.v1.reviews import router as reviews_router
from villamarket.api.v1.villas import router as villas_router
from villamarket.config import settings
from villamarket.errors import MarketplaceError

# Configure root logger so all villamarket.* loggers output to stderr.
logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "authorization": status.HTTP_403_FORBIDDEN,
    "conflict": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    logger.info("%s %s starting (%s)", settings.app_name, settings.app_version, settings.environment)
    yield
    # Shutdown: dispose engine connections
    from villamarket.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Vacation-rental marketplace: villa listings, availability, bookings and reviews.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Translate core errors into JSON responses carrying the reason code."""
    status_code = ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.reason)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_code": exc.reason.value},
    )


# Routers
app.include_router(auth_router)
app.include_router(villas_router)
app.include_router(availability_router)
app.include_router(bookings_router)
app.include_router(reviews_router)
app.include_router(amenities_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
