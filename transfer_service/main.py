"""Transfer Service API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TransferServiceError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, logging, and the customer service client initialized in lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Customer service client created only when CUSTOMER_SERVICE_URL is set
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import transfer_service.infrastructure.database as database
from transfer_service.api.error_handlers import register_error_handlers
from transfer_service.api.routes import customers, health, transfers
from transfer_service.config import get_settings
from transfer_service.infrastructure.customer_directory import build_customer_client
from transfer_service.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.customer_client = None
    if settings.customer_service_url:
        app.state.customer_client = build_customer_client(
            settings.customer_service_url,
            settings.customer_service_timeout_seconds,
        )
    logger.info("Transfer service started")
    yield
    logger.info("Transfer service shutting down")
    if app.state.customer_client is not None:
        await app.state.customer_client.aclose()
    if database.db_manager is not None:
        await database.db_manager.dispose()


app = FastAPI(
    title="Transfer Service API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(transfers.router)
app.include_router(customers.router)

register_error_handlers(app)
