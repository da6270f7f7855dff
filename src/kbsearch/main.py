"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Logging constants defined here (not in constants/) because logging.basicConfig()
# must run before any module imports that might create loggers.
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    format=LOG_FORMAT,
    datefmt=DATE_FORMAT,
    level=logging.INFO,
)

# Unify uvicorn loggers with app format
for uvicorn_logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
    uvicorn_logger = logging.getLogger(uvicorn_logger_name)
    uvicorn_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    uvicorn_logger.addHandler(handler)

from kbsearch import __version__  # noqa: E402
from kbsearch.api.deps import get_settings, get_store  # noqa: E402
from kbsearch.api.routers import search  # noqa: E402
from kbsearch.store.base import StoreError  # noqa: E402
from kbsearch.store.seed import load_seed_file  # noqa: E402

logger = logging.getLogger(__name__)


def _ensure_data_dir() -> None:
    """Create the data directory if it doesn't exist."""
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Data directory: {settings.data_dir}")


def _load_seed() -> int:
    """Load the configured seed file into the store, if one is set.

    Returns:
        Number of records loaded.
    """
    settings = get_settings()
    if settings.seed_file is None:
        return 0
    store = get_store()
    try:
        return load_seed_file(settings.seed_file, store)  # type: ignore[arg-type]
    except StoreError as e:
        logger.warning(f"Failed to load seed file {settings.seed_file}: {e}")
        return 0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan handler for startup and shutdown events.

    On startup:
    - Ensures the data directory exists
    - Loads the seed file, when configured
    """
    _ensure_data_dir()

    loaded = _load_seed()
    if loaded > 0:
        logger.info(f"Seeded {loaded} content item(s)")

    logger.info("kbsearch started")

    yield


app = FastAPI(
    title="kbsearch",
    description="Relevance search for knowledge-base articles and tutorials",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


app.include_router(search.router)
