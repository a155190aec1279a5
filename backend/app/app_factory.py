"""Application factory for the sales reporting API.

Order and credit persistence are owned by other services, so the factory
takes them as arguments and attaches them to ``app.state``. Without an
order source the reporting endpoints answer 503 instead of failing to
start, which keeps `docker compose up` usable before the stores are wired.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.exceptions import register_exception_handlers
from core.logging_config import configure_logging
from modules.sales_reports import __version__
from modules.sales_reports.interfaces import CreditSource, OrderSource
from modules.sales_reports.routers import router as sales_report_router

LOGGER = logging.getLogger(__name__)


def create_app(
    order_source: Optional[OrderSource] = None,
    credit_source: Optional[CreditSource] = None,
) -> FastAPI:
    """Create the FastAPI application with the given data sources."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Restaurant Sales Reports API",
        description="Sales analytics, PDF reports and flat exports for restaurants.",
        version=__version__,
        debug=settings.debug,
    )
    app.state.order_source = order_source
    app.state.credit_source = credit_source

    # Register exception handlers for consistent error responses
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:3001"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(sales_report_router)

    @app.get("/", tags=["health"])
    def read_root() -> dict:
        return {
            "status": "ok",
            "order_source": order_source is not None,
            "credit_source": credit_source is not None,
        }

    if order_source is None:
        LOGGER.warning("No order source configured; report endpoints will return 503")

    return app
