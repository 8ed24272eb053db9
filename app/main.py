"""
FastAPI Application

Exposes the alert check trigger and a health endpoint.
"""

from fastapi import FastAPI

from app.routers import alerts
from app.utils.logger import create_logger

logger = create_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Watchlist Alerts", version="1.0.0")
    app.include_router(alerts.router, prefix="/api")

    @app.get("/api/health", tags=["Health"])
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
