"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from yappy.api import auth, messages, push, users
from yappy.config import get_settings
from yappy.database import init_engine, shutdown_engine
from yappy.exceptions import StoreError, YappyError

settings = get_settings()
logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    configure_logging()
    init_engine()
    yield
    shutdown_engine()


app = FastAPI(
    title="Yappy Notes API",
    description="Notes app with a passcode-gated two-person chat behind it",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(YappyError)
async def handle_domain_error(request: Request, exc: YappyError) -> JSONResponse:
    """Render domain errors with their own status code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Log unexpected database failures and hide the details from the client."""
    logger.exception(f"Database error on {request.method} {request.url.path}")
    error = StoreError("Database operation failed")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Register routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(messages.router)
app.include_router(push.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
