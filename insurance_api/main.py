"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from insurance_api import __version__
from insurance_api.api import router as api_router
from insurance_api.api.deps import get_user_repository
from insurance_api.core.config import settings
from insurance_api.core.database import get_client
from insurance_api.core.exceptions import register_exception_handlers
from insurance_api.core.logging import add_request_logging, configure_logging

configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    try:
        get_user_repository().ensure_indexes()
        logger.info("MongoDB connected; user indexes ensured.")
    except PyMongoError as e:
        # Registration retries the index before its first insert.
        logger.error("MongoDB connection failed: %s", e)
    yield
    get_client().close()


app = FastAPI(
    title="Insurance Management API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

cors_origins = settings.CORS_ORIGINS or (["*"] if settings.is_dev else [])
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
if settings.is_dev:
    add_request_logging(app)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, object]:
    """Root route; minimal payload for discovery."""
    return {"success": True, "message": "Insurance Management API is running!"}


def serve() -> None:
    """Console entrypoint: run the API on PORT."""
    logger.info("Starting server on port %s (mode: %s)", settings.PORT, settings.APP_ENV)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    serve()
