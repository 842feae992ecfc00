"""
Trip Events Backend — FastAPI Entry Point

This is the main application module for the trip events backend.
It configures logging, initializes the FastAPI app and registers
all route handlers.
"""

import logging

from fastapi import FastAPI

from trip_events.api.events import router as events_router
from trip_events.core.config import LOG_LEVEL, PROJECT_NAME

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=f"{PROJECT_NAME} API",
    description="Aggregated events, attractions and dining for a trip",
    version="0.1.0",
)

# --- Register API routers ---
app.include_router(events_router)


@app.get("/health")
async def health_check():
    """Health check endpoint. Returns service status."""
    return {"status": "ok"}
