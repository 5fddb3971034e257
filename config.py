"""Settings, API credentials and lookup tables for the city weather hub."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)

# Server
PORT = int(os.getenv("PORT", "3001"))
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# Cache (seconds)
CACHE_TTL = int(os.getenv("CACHE_TTL", "300"))
CACHE_CHECK_PERIOD = int(os.getenv("CACHE_CHECK_PERIOD", "600"))

# Upstream HTTP timeout (seconds)
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

API_CONFIG = {
    "openweather": {
        "key": os.getenv("OPENWEATHER_API_KEY"),
        "base_url": os.getenv("OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5"),
    },
    "unsplash": {
        "key": os.getenv("UNSPLASH_ACCESS_KEY"),
        "base_url": os.getenv("UNSPLASH_BASE_URL", "https://api.unsplash.com"),
    },
    "geodb": {
        "key": os.getenv("GEODB_API_KEY"),
        "base_url": os.getenv("GEODB_BASE_URL", "https://wft-geo-db.p.rapidapi.com/v1"),
        "host": "wft-geo-db.p.rapidapi.com",
    },
}

_KEY_ENV_NAMES = {
    "openweather": "OPENWEATHER_API_KEY",
    "unsplash": "UNSPLASH_ACCESS_KEY",
    "geodb": "GEODB_API_KEY",
}

AVAILABLE_ENDPOINTS = [
    "GET /api/weather?city=London&country=GB",
    "GET /api/city?city=London&country=GB",
    "GET /api/image?city=London&country=GB",
    "GET /api/health",
    "DELETE /api/cache",
    "DELETE /api/cache/:key",
]

# OpenWeatherMap air pollution index: value -> (label, css class)
AQI_LEVELS = {
    1: ("Good", "good"),
    2: ("Fair", "moderate"),
    3: ("Moderate", "unhealthy-sensitive"),
    4: ("Poor", "unhealthy"),
    5: ("Very Poor", "very-unhealthy"),
}

# OpenWeatherMap icon codes
WEATHER_ICONS = {
    "01d": "☀️",      "01n": "\U0001f319",
    "02d": "⛅",            "02n": "☁️",
    "03d": "☁️",      "03n": "☁️",
    "04d": "☁️",      "04n": "☁️",
    "09d": "\U0001f326️",  "09n": "\U0001f327️",
    "10d": "\U0001f326️",  "10n": "\U0001f327️",
    "11d": "⛈️",      "11n": "⛈️",
    "13d": "❄️",      "13n": "❄️",
    "50d": "\U0001f32b️",  "50n": "\U0001f32b️",
}
DEFAULT_WEATHER_ICON = "\U0001f324️"


def missing_api_keys(api_config=None):
    """Return the environment variable names of every unset API key."""
    api_config = api_config or API_CONFIG
    return [env for provider, env in _KEY_ENV_NAMES.items()
            if not api_config.get(provider, {}).get("key")]


def validate_api_keys(api_config=None):
    """Warn about missing credentials. Never raises."""
    missing = missing_api_keys(api_config)
    if missing:
        log.warning("Missing API keys: %s", ", ".join(missing))
        log.warning("Some features may not work properly. Please check your .env file.")
    return missing


def get_aqi_info(aqi_value):
    """Return (label, css_class) for an OpenWeatherMap AQI value."""
    return AQI_LEVELS.get(aqi_value, ("Unknown", "moderate"))


def get_weather_icon(icon_code):
    """Return the emoji for an OpenWeatherMap icon code."""
    return WEATHER_ICONS.get(icon_code, DEFAULT_WEATHER_ICON)
