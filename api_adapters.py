# Contains the adapter classes for requesting raw responses from the Google web services.

import locale
import logging
import os
from abc import ABC, abstractmethod

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- API Configuration ---
# Keys are read from environment variables for security.
load_dotenv()
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")

CONNECTION_TIMEOUT = 30  # seconds
TRAVEL_MODES = ("driving", "walking", "bicycling", "transit")


def default_language() -> str:
    """Language for directions: ROUTE_CACHE_LANGUAGE, the system locale, or 'en'."""
    configured = os.getenv("ROUTE_CACHE_LANGUAGE")
    if configured:
        return configured
    try:
        lang, _ = locale.getlocale()
    except ValueError:
        lang = None
    if lang and lang not in ("C", "POSIX"):
        return lang.split("_")[0]
    return "en"


class ApiAdapter(ABC):
    """
    Abstract Base Class (blueprint) for all API clients.
    Adapters only fetch; the returned text is handed to response_parser.
    """
    @abstractmethod
    def request_cities(self, text: str) -> str:
        """Returns the raw autocomplete response for the typed text."""
        pass

    @abstractmethod
    def request_directions(self, origin: str, destination: str, travel_mode: str = "driving") -> str:
        """Returns the raw directions response between two places."""
        pass


class GoogleMapsAdapter(ApiAdapter):
    """The adapter for the Google Places Autocomplete and Directions APIs."""
    AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
    DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

    def __init__(self, api_key: str | None = None, language: str | None = None, verbose: bool = False):
        self.api_key = api_key or GOOGLE_API_KEY
        if not self.api_key:
            raise ValueError(
                "FATAL ERROR: The GOOGLE_API_KEY environment variable is not set.")
        self.language = language or default_language()
        self.verbose = verbose

    def _get(self, url: str, params: dict) -> str:
        if self.verbose:
            shown = {k: v for k, v in params.items() if k != 'key'}
            logger.info("GET %s %s", url, shown)
        try:
            response = requests.get(url, params=params,
                                    headers={'Content-Type': 'application/json'},
                                    timeout=CONNECTION_TIMEOUT)
            if response.status_code == requests.codes.ok:
                return response.text
            logger.warning("Request to %s failed with HTTP %d", url, response.status_code)
            return response.reason or ""
        except requests.exceptions.RequestException as e:
            logger.error("Error connecting to %s: %s", url, e)
            return str(e)

    def request_cities(self, text: str) -> str:
        params = {
            'input': text,
            'sensor': 'true',
            'key': self.api_key,
        }
        return self._get(self.AUTOCOMPLETE_URL, params)

    def request_directions(self, origin: str, destination: str, travel_mode: str = "driving") -> str:
        if travel_mode not in TRAVEL_MODES:
            raise ValueError(
                f"Unknown travel mode '{travel_mode}'. Expected one of: {', '.join(TRAVEL_MODES)}")
        params = {
            'origin': origin,
            'destination': destination,
            'sensor': 'true',
            'language': self.language,
            'mode': travel_mode,
            'key': self.api_key,
        }
        return self._get(self.DIRECTIONS_URL, params)
