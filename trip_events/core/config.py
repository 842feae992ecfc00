"""
Application Configuration

Loads environment variables and provides typed settings
for the application. Uses python-dotenv to load from .env file.

Provider credentials are also exposed as a frozen ProviderSettings object
that is resolved once and injected into each provider adapter at
construction time.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load .env file from the project root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

# --- App Settings ---
API_V1_PREFIX = "/api/v1"
PROJECT_NAME = "Trip Events"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# --- Ticketmaster Discovery API ---
TICKETMASTER_API_KEY: str = os.getenv("TICKETMASTER_API_KEY", "")

# --- SeatGeek ---
SEATGEEK_CLIENT_ID: str = os.getenv("SEATGEEK_CLIENT_ID", "")
SEATGEEK_CLIENT_SECRET: str = os.getenv("SEATGEEK_CLIENT_SECRET", "")

# --- PredictHQ ---
PREDICTHQ_ACCESS_TOKEN: str = os.getenv("PREDICTHQ_ACCESS_TOKEN", "")

# --- SerpAPI (Google Events) ---
SERPAPI_KEY: str = os.getenv("SERPAPI_KEY", "")

# --- Google Places ---
GOOGLE_PLACES_API_KEY: str = os.getenv("GOOGLE_PLACES_API_KEY", "")

# --- Yelp Fusion ---
YELP_API_KEY: str = os.getenv("YELP_API_KEY", "")


class ProviderSettings(BaseModel):
    """
    Credentials for every upstream provider.

    Empty strings mean "not configured". Adapters check their own fields
    only and never read the environment after construction.
    """

    model_config = ConfigDict(frozen=True)

    ticketmaster_api_key: str = ""
    seatgeek_client_id: str = ""
    seatgeek_client_secret: str = ""
    predicthq_access_token: str = ""
    serpapi_key: str = ""
    google_places_api_key: str = ""
    yelp_api_key: str = ""

    @classmethod
    def from_env(cls) -> "ProviderSettings":
        """Build settings from the module-level environment constants."""
        return cls(
            ticketmaster_api_key=TICKETMASTER_API_KEY,
            seatgeek_client_id=SEATGEEK_CLIENT_ID,
            seatgeek_client_secret=SEATGEEK_CLIENT_SECRET,
            predicthq_access_token=PREDICTHQ_ACCESS_TOKEN,
            serpapi_key=SERPAPI_KEY,
            google_places_api_key=GOOGLE_PLACES_API_KEY,
            yelp_api_key=YELP_API_KEY,
        )


@lru_cache(maxsize=1)
def get_settings() -> ProviderSettings:
    """Return the process-wide ProviderSettings, built on first use."""
    return ProviderSettings.from_env()


def is_ticketmaster_configured(settings: Optional[ProviderSettings] = None) -> bool:
    """Check if the Ticketmaster API key is present."""
    return bool((settings or get_settings()).ticketmaster_api_key)


def is_seatgeek_configured(settings: Optional[ProviderSettings] = None) -> bool:
    """
    Check if SeatGeek is usable.

    Only the client id is required. The client secret is optional and is
    sent along when present.
    """
    return bool((settings or get_settings()).seatgeek_client_id)


def is_predicthq_configured(settings: Optional[ProviderSettings] = None) -> bool:
    return bool((settings or get_settings()).predicthq_access_token)


def is_serpapi_configured(settings: Optional[ProviderSettings] = None) -> bool:
    return bool((settings or get_settings()).serpapi_key)


def is_google_places_configured(settings: Optional[ProviderSettings] = None) -> bool:
    return bool((settings or get_settings()).google_places_api_key)


def is_yelp_configured(settings: Optional[ProviderSettings] = None) -> bool:
    """Check if the Yelp Fusion API key is present."""
    return bool((settings or get_settings()).yelp_api_key)
