import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from business.errors import HangoutPlannerError
from database import orm
from routers import router
from utils.constants import WEBAPP_URL

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()  # This outputs to console
    ],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info("Starting application...")

    try:
        logger.info("Running database migrations...")
        orm.run_migrations()
        logger.info("Database initialization completed successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    yield  # Application runs here

    logger.info("Application shutdown completed")


app = FastAPI(
    title="Hangout Planner API",
    description="Plan hangouts with friends, gated by mutual-friend approval",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        WEBAPP_URL,
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, tags=["API v1"])


@app.exception_handler(HangoutPlannerError)
async def hangout_planner_error_handler(request: Request, exc: HangoutPlannerError):
    logger.info(
        f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.detail}"
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/")
async def read_root() -> dict:
    return {"message": "Hangout Planner API is running..."}


@app.get("/health")
async def health_check():
    """Health check with database connectivity test."""
    db_status = "unknown"
    try:
        db_status = "connected" if orm.check_connection() else "disconnected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "error"

    return {
        "status": "healthy",
        "database": db_status,
        "environment": os.getenv("ENVIRONMENT", "development"),
    }
