"""FastAPI application factory"""

import logging
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import Response

from cashflow_forecast.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashflow_forecast.api.v1 import forecast, forecast_items, payment_rules
from cashflow_forecast.infrastructure.database.session import get_db
from cashflow_forecast.infrastructure.observability.logging import setup_logging
from cashflow_forecast.config import settings

# Setup structured logging
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cash Flow Forecast",
        description="Weekly cash-flow forecast over actuals, AR forecasts and recurring payments",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check pings the database
    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: database unreachable: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "service": settings.service_name, "database": "unavailable"},
            )
        return {"status": "ok", "service": settings.service_name, "database": "ok"}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])
    app.include_router(payment_rules.router, prefix="/v1", tags=["payment-rules"])
    app.include_router(forecast_items.router, prefix="/v1", tags=["forecast-items"])

    return app


app = create_app()
