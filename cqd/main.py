"""Code quality dashboard FastAPI application."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from cqd.api.catalog import router as catalog_router
from cqd.api.health import router as health_router
from cqd.api.source import router as source_router
from cqd.config import get_settings
from cqd.exceptions import DashboardError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CQD - Code Quality Dashboard",
    description="Drill-down API over code sample evaluation records",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected server error occurred.", "details": str(exc)},
    )


app.include_router(health_router, tags=["Health"])
app.include_router(catalog_router, prefix="/api", tags=["Catalog"])
app.include_router(source_router, prefix="/api", tags=["Source"])

if settings.static_dir:
    if Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("STATIC_DIR %s does not exist; not serving static files", settings.static_dir)


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
