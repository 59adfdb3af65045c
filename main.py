"""FastAPI application — entry point for the changelog service."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from db import create_tables
from routes import router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("=" * 70)
    logger.info("Changelog Engine - Starting Up")
    logger.info("=" * 70)
    logger.info("Mode: %s", "DEMO MODE" if settings.demo_mode else "PRODUCTION MODE")
    logger.info("Port: %d", settings.port)

    logger.info("Creating database tables...")
    await create_tables()

    if settings.demo_mode and settings.seed_on_startup:
        logger.info("Demo mode enabled - seeding demo entries...")
        try:
            from scripts.seed_demo_data import seed_demo_data
            await seed_demo_data()
            logger.info("Demo entries seeded")
        except Exception as e:
            logger.error("Failed to seed demo data: %s", e)
            logger.error("Continuing without demo data...")

    logger.info("Changelog Engine is running on http://localhost:%d", settings.port)
    yield
    logger.info("Shutdown complete")


app = FastAPI(
    title="Changelog Engine",
    description="Product changelog API: filtering, grouping, search, approvals and public feed",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}" for err in errors
    )
    return JSONResponse(status_code=400, content={"success": False, "error": message or "Invalid request"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


app.include_router(router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
