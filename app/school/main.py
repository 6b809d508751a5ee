# app/school/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .api import attendance, classes, users
from .api.error_handlers import register_exception_handlers
from .api.utilities.limiter import limiter
from .config.config import settings
from .container import build_container
from .db import mongo
from .logging.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Builds the shared resources once at startup: the Mongo client, indexes and
    the repository/service graph. Any failure here aborts startup.
    """
    settings.validate()
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    logger.info("Application starting...")

    client = await mongo.connect(settings.MONGODB_URI)
    try:
        db = mongo.get_database(client, settings.MONGODB_DB_NAME)
        await mongo.ensure_indexes(db)
        app.state.mongo_client = client
        app.state.container = build_container(db=db, config=settings)
        logger.info("Repositories and services are ready.")

        yield
    finally:
        logger.info("Application shutting down...")
        client.close()
        logger.info("MongoDB connection closed.")


ping_router = APIRouter(prefix="/ping", tags=["System"])


@ping_router.get("")
async def ping():
    return {"success": True, "message": "pong"}


def create_app() -> FastAPI:
    app = FastAPI(
        title="School API",
        description="Users, classes and attendance tracking",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(ping_router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(classes.router, prefix="/api/v1")
    app.include_router(attendance.router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    def health_check():
        """Simple liveness endpoint."""
        return {"status": "ok", "message": "School API is running."}

    return app


app = create_app()
