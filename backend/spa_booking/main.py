# backend/spa_booking/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION
from .database import engine
from .errors import register_error_handlers
from .init_db import create_tables
from .routes.v1 import bookings as bookings_v1, packages as packages_v1, programs as programs_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create missing tables on startup for local SQLite stores."""
    logger.info("Starting %s booking API v%s (%s)", settings.brand_name, API_VERSION, settings.environment)
    if settings.is_sqlite:
        create_tables()
    yield
    logger.info("Shutting down %s", API_TITLE)


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

# Register unified error envelope handlers
register_error_handlers(app)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(programs_v1.router, prefix="/programs")
api_v1.include_router(packages_v1.router, prefix="/packages")
app.include_router(api_v1)


class HealthResponse(BaseModel):
    status: str
    database: str
    version: str
    environment: str


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    database = "ok"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {str(e)}")
        database = "unavailable"
    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        version=API_VERSION,
        environment=settings.environment,
    )
