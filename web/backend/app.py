#!/usr/bin/env python3
"""
PPDB Selection API - FastAPI Application

Exposes scoring, ranking, quota allocation and result announcement for
school-admission periods, plus the public result lookup.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException

from core.exceptions import ServiceException
from .config import get_config
from .exceptions import (
    service_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import (
    selection_router,
    announcements_router,
    periods_router,
    registrations_router
)
from .routers.announcements import add_rate_limit_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="PPDB Selection API",
    description="Scoring, ranking and quota allocation for school admission",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure rate limiting
add_rate_limit_handlers(app)

# Register exception handlers
app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(selection_router)
app.include_router(announcements_router)
app.include_router(periods_router)
app.include_router(registrations_router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ppdb-selection"}


def main():
    """Run the web server."""
    import uvicorn

    config = get_config()
    logger.info(f"Starting PPDB Selection API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
