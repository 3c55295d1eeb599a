"""
WeDine backend - application entry point
Campus food ordering: catalog, cart, orders, payments, shop dashboard and reviews

Main modules:
- Catalog browsing and stock
- Cart and order placement (COD / Razorpay)
- Order lifecycle: duplicate prevention, archiving, cleanup jobs
- Shop staff dashboard
- Reviews and SMS notifications

Stack: FastAPI + DuckDB + JWT
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .config.settings import settings
from .core.database import db_manager
from .core.error_handler import (
    application_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.exceptions import BaseApplicationError
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan"""
    try:
        db_manager.init_database()
        logger.info("Database initialized")
    except Exception as e:
        # the connection is opened lazily, so requests can still retry
        logger.error("Database initialization failed: %s", e)

    yield


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    configure_logging()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="WeDine campus food ordering API",
        debug=settings.debug,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        try:
            db_manager.get_connection()
            return {
                "status": "healthy",
                "version": settings.api_version,
                "database": "connected"
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "version": settings.api_version,
                "database": f"error: {str(e)}"
            }

    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": "WeDine campus food ordering API"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
