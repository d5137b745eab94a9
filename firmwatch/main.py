"""FastAPI application entrypoint. No business logic; only wiring, middleware and the scan scheduler."""

from dotenv import load_dotenv

load_dotenv()

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from firmwatch.api.v1 import router as v1_router
from firmwatch.core.config import settings
from firmwatch.scheduler import start_scheduler, stop_scheduler


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Start periodic scans with the app and stop them on shutdown."""
    if settings.SCHEDULER_ENABLED:
        start_scheduler(settings)
    try:
        yield
    finally:
        stop_scheduler()


app = FastAPI(
    title="Firmwatch API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Firmwatch API"}
