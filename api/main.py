"""Customer.io integration API: FastAPI entry point.

Hosts the reporting-webhook receiver under /webhooks/ and a health check.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import BaseModel

from api.router import router as webhook_router

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERSION = "0.1.0"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    logger.info("Customer.io integration API started")
    yield
    logger.info("Customer.io integration API shutting down")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Customer.io Integration",
    description="Receives Customer.io reporting webhooks",
    version=VERSION,
    lifespan=lifespan,
)

app.include_router(webhook_router, prefix="/webhooks", tags=["Webhooks"])


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str
    version: str


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="healthy", version=VERSION)
