"""OpenWeatherMap client for current weather, forecast and air pollution."""

from config import API_CONFIG
from data_sources.upstream import get_json

_PROVIDER = "OpenWeatherMap"
_NOT_FOUND = "Please check the city name and try again"


def _url(path):
    return f"{API_CONFIG['openweather']['base_url']}/{path}"


def _key():
    return API_CONFIG["openweather"]["key"]


def fetch_current(city, country=None):
    """Current conditions by city name. The response carries ``coord``."""
    params = {
        "q": f"{city},{country}" if country else city,
        "appid": _key(),
        "units": "metric",
    }
    return get_json(_PROVIDER, _url("weather"), params=params, not_found_message=_NOT_FOUND)


def fetch_forecast(lat, lon):
    """5-day / 3-hour forecast for a coordinate."""
    params = {"lat": lat, "lon": lon, "appid": _key(), "units": "metric"}
    return get_json(_PROVIDER, _url("forecast"), params=params, not_found_message=_NOT_FOUND)


def fetch_air_quality(lat, lon):
    """Current air pollution reading for a coordinate."""
    params = {"lat": lat, "lon": lon, "appid": _key()}
    return get_json(_PROVIDER, _url("air_pollution"), params=params)
