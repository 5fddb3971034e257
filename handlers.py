"""Endpoint handlers: validate, build cache key, fetch through the cache, shape.

Handlers know nothing about Flask. They raise the errors in ``errors`` and
the routes in ``app`` turn those into HTTP responses.
"""

import logging

from cache import make_key
from data_sources import geodb, openweather, unsplash
from errors import NotFoundError, UpstreamError, ValidationError
from models import CityResult, Coordinates, ImageResult, WeatherResult

log = logging.getLogger(__name__)


def _require_city(city, endpoint):
    city = (city or "").strip()
    if not city:
        raise ValidationError(
            "City parameter is required",
            example=f"/api/{endpoint}?city=London&country=GB",
        )
    return city


def _clean_country(country):
    country = (country or "").strip()
    return country or None


def get_weather(cache, city, country=None):
    """Current weather, forecast and (optional) air quality for a city."""
    city = _require_city(city, "weather")
    country = _clean_country(country)

    def produce():
        current = openweather.fetch_current(city, country)
        coord = current.get("coord") or {}
        if "lat" not in coord or "lon" not in coord:
            raise UpstreamError("OpenWeatherMap", "Weather response did not include coordinates")
        lat, lon = coord["lat"], coord["lon"]

        forecast = openweather.fetch_forecast(lat, lon)

        air_quality = None
        try:
            air_quality = openweather.fetch_air_quality(lat, lon)
        except (NotFoundError, UpstreamError) as exc:
            log.warning("Air quality data not available for %s: %s", city, exc.message)

        return WeatherResult(
            current=current,
            forecast=forecast,
            air_quality=air_quality,
            coordinates=Coordinates(lat=lat, lon=lon),
        ).to_dict()

    return cache.get_or_compute(make_key("weather", city, country), produce)


def get_city(cache, city, country=None):
    """Most populous directory match for a city name."""
    city = _require_city(city, "city")
    country = _clean_country(country)

    def produce():
        matches = geodb.search_cities(city, country, limit=1)
        if not matches:
            raise NotFoundError("City not found")
        return CityResult.from_geodb(matches[0]).to_dict()

    return cache.get_or_compute(make_key("city", city, country), produce)


def get_image(cache, city, country=None):
    """First landscape photo matching "city, country"."""
    city = _require_city(city, "image")
    country = _clean_country(country)

    def produce():
        query = f"{city}, {country}" if country else city
        photos = unsplash.search_photos(query, per_page=5, orientation="landscape")
        if not photos:
            raise NotFoundError("No images available for this city")
        return ImageResult.from_unsplash(photos[0], city).to_dict()

    return cache.get_or_compute(make_key("image", city, country), produce)
