"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import destinations  # noqa: E402
from services.destination_resolver import get_default_resolver  # noqa: E402
from settings import settings  # noqa: E402

logger = logging.getLogger(__name__)

app = FastAPI(
    title="City Destinations API",
    description="Points of interest near a city, resolved from OpenStreetMap",
    version="0.1.0",
)

# Read-only API consumed by a browser frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(destinations.router, prefix="/destinations", tags=["destinations"])


@app.on_event("startup")
def startup_event():
    """Create the process-wide resolver and its cache once, before the first request."""
    get_default_resolver()
    logger.info(
        "[startup] nominatim=%s overpass=%s radius_m=%d limit=%d retries=%dx%dms",
        settings.NOMINATIM_SEARCH_URL,
        settings.OVERPASS_URL,
        settings.SEARCH_RADIUS_M,
        settings.RESULT_LIMIT,
        settings.RETRY_ATTEMPTS,
        settings.RETRY_DELAY_MS,
    )


@app.get("/")
async def root():
    return {"status": "ok", "service": "City Destinations API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
