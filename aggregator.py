"""Client that fans out to the hub's three endpoints and builds a display model.

Temperatures are stored in Celsius as the hub returns them and converted
only when a view is rendered, so switching units never refetches.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

import config

log = logging.getLogger(__name__)

CELSIUS = "celsius"
FAHRENHEIT = "fahrenheit"

_DEFAULT_ERRORS = {
    "weather": "Failed to fetch weather data",
    "city": "Failed to fetch city data",
    "image": "Failed to fetch image data",
}
_WEATHER_REQUIRED = "Unable to fetch weather data. Please check the city name and try again."


class ApiError(Exception):
    """An endpoint answered with a non-2xx status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SearchError(Exception):
    """The search cannot be displayed because weather data is missing."""


# ── Unit conversion ───────────────────────────────────────────────────

def _check_unit(unit):
    if unit not in (CELSIUS, FAHRENHEIT):
        raise ValueError(f"Unknown temperature unit: {unit!r}")


def round_half_up(value):
    """Round halves toward positive infinity: 20.5 -> 21, -0.5 -> 0."""
    return math.floor(value + 0.5)


def _with_unit(value, suffix):
    return "N/A" if value is None else f"{value}{suffix}"


def convert_temperature(celsius, unit=CELSIUS):
    """Round a Celsius reading into the requested unit."""
    _check_unit(unit)
    if unit == FAHRENHEIT:
        return round_half_up(celsius * 9 / 5 + 32)
    return round_half_up(celsius)


def temperature_symbol(unit=CELSIUS):
    _check_unit(unit)
    return "°C" if unit == CELSIUS else "°F"


def format_temperature(celsius, unit=CELSIUS):
    return f"{convert_temperature(celsius, unit)}{temperature_symbol(unit)}"


def format_number(num):
    return f"{num:,}"


def daily_forecasts(entries, days=5):
    """One 3-hour entry per day: every 8th entry, at most ``days`` of them."""
    return entries[::8][:days]


# ── Settled results ───────────────────────────────────────────────────

@dataclass
class Settled:
    """Outcome of one concurrent call: a value or the error it raised."""
    value: Optional[dict] = None
    error: Optional[Exception] = None

    @property
    def ok(self):
        return self.error is None


def _settle(future):
    try:
        return Settled(value=future.result())
    except (ApiError, requests.RequestException) as exc:
        return Settled(error=exc)


# ── Display model ─────────────────────────────────────────────────────

@dataclass
class DisplayModel:
    city: str
    country: Optional[str]
    weather: dict
    city_info: Optional[dict] = None
    image: Optional[dict] = None
    fetched_at: Optional[datetime] = None

    def render(self, unit=CELSIUS):
        """Build the view dict with every temperature in ``unit``."""
        current = self.weather["current"]
        main = current.get("main", {})
        conditions = (current.get("weather") or [{}])[0]
        description = conditions.get("description", "")
        symbol = temperature_symbol(unit)

        hero = {
            "title": current.get("name") or self.city,
            "subtitle": current.get("sys", {}).get("country") or self.country or "",
            "image_url": (self.image or {}).get("urls", {}).get("regular"),
            "temperature": format_temperature(main["temp"], unit),
            "description": description,
        }
        weather_card = {
            "icon": config.get_weather_icon(conditions.get("icon")),
            "temperature": format_temperature(main["temp"], unit),
            "feels_like": format_temperature(main.get("feels_like", main["temp"]), unit),
            "description": description,
            "humidity": _with_unit(main.get("humidity"), "%"),
            "wind_speed": _with_unit(current.get("wind", {}).get("speed"), " m/s"),
            "pressure": _with_unit(main.get("pressure"), " hPa"),
        }
        temp = convert_temperature(main["temp"], unit)
        return {
            "hero": hero,
            "weather": weather_card,
            "air_quality": self._air_quality_card(),
            "city": self._city_card(),
            "forecast": self._forecast(unit),
            "share_text": f"Weather in {self.city}: {temp}{symbol}, {description}",
            "unit": unit,
        }

    def _air_quality_card(self):
        air = self.weather.get("airQuality")
        if not air or not air.get("list"):
            return None
        reading = air["list"][0]
        aqi = reading.get("main", {}).get("aqi")
        level, css_class = config.get_aqi_info(aqi)
        components = reading.get("components", {})

        def fmt(name):
            value = components.get(name)
            return "N/A" if value is None else f"{round_half_up(value)} μg/m³"

        return {
            "aqi": aqi,
            "level": level,
            "css_class": css_class,
            "pm2_5": fmt("pm2_5"),
            "pm10": fmt("pm10"),
            "o3": fmt("o3"),
        }

    def _city_card(self):
        info = self.city_info
        if not info:
            return None
        lat, lon = info.get("latitude"), info.get("longitude")
        return {
            "population": format_number(info["population"]) if info.get("population") else "N/A",
            "timezone": info.get("timezone") or "N/A",
            "elevation": f"{info['elevationMeters']} m" if info.get("elevationMeters") else "N/A",
            "coordinates": f"{lat:.2f}, {lon:.2f}" if lat is not None and lon is not None else "N/A",
        }

    def _forecast(self, unit):
        """Daily entries labelled with the weekday in the viewer's local time."""
        entries = (self.weather.get("forecast") or {}).get("list") or []
        days = []
        for entry in daily_forecasts(entries):
            when = datetime.fromtimestamp(entry["dt"])
            days.append({
                "day": when.strftime("%a"),
                "temperature": format_temperature(entry["main"]["temp"], unit),
                "description": (entry.get("weather") or [{}])[0].get("description", ""),
            })
        return days


# ── Client ────────────────────────────────────────────────────────────

class WeatherHubClient:
    def __init__(self, base_url=f"http://localhost:{config.PORT}/api", session=None,
                 timeout=config.HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.last_search = None

    def _get(self, endpoint, city, country):
        params = {"city": city}
        if country:
            params["country"] = country
        resp = self.session.get(f"{self.base_url}/{endpoint}", params=params, timeout=self.timeout)
        if not resp.ok:
            try:
                message = resp.json().get("message")
            except ValueError:
                message = None
            raise ApiError(message or _DEFAULT_ERRORS[endpoint], status_code=resp.status_code)
        return resp.json()

    def fetch_weather(self, city, country=None):
        return self._get("weather", city, country)

    def fetch_city(self, city, country=None):
        return self._get("city", city, country)

    def fetch_image(self, city, country=None):
        return self._get("image", city, country)

    def search(self, city, country=None):
        """Fetch all three resources concurrently and merge what succeeded.

        Raises SearchError when the weather call fails; city and image
        failures only leave their part of the model empty.
        """
        self.last_search = (city, country)
        log.info("Searching for: %s%s", city, f", {country}" if country else "")

        with ThreadPoolExecutor(max_workers=3) as ex:
            futures = {
                "weather": ex.submit(self.fetch_weather, city, country),
                "city": ex.submit(self.fetch_city, city, country),
                "image": ex.submit(self.fetch_image, city, country),
            }
            results = {name: _settle(f) for name, f in futures.items()}

        for name, result in results.items():
            if not result.ok:
                log.warning("%s request failed: %s", name, result.error)

        if not results["weather"].ok:
            raise SearchError(_WEATHER_REQUIRED)

        return DisplayModel(
            city=city,
            country=country,
            weather=results["weather"].value,
            city_info=results["city"].value,
            image=results["image"].value,
            fetched_at=datetime.now(timezone.utc),
        )

    def retry(self):
        """Replay the last search."""
        if self.last_search is None:
            raise SearchError("Nothing to retry yet. Search for a city first.")
        city, country = self.last_search
        return self.search(city, country)
