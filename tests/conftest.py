"""
Shared fixtures: a controllable clock, a cache bound to it, the Flask test
client, and canned upstream payloads. No test touches the network.
"""

import os
from datetime import datetime, timedelta

import pytest

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-owm-key")
os.environ.setdefault("UNSPLASH_ACCESS_KEY", "test-unsplash-key")
os.environ.setdefault("GEODB_API_KEY", "test-geodb-key")

from app import create_app  # noqa: E402
from cache import ResponseCache  # noqa: E402


class FakeClock:
    def __init__(self):
        self.current = datetime(2024, 5, 1, 12, 0, 0)

    def __call__(self):
        return self.current

    def advance(self, seconds):
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl=300, now=clock)


@pytest.fixture
def app(cache):
    app = create_app(cache=cache, environment="development")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


# ---------------------------------------------------------------------------
# Upstream payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def current_payload():
    return {
        "coord": {"lat": 51.5, "lon": -0.1},
        "name": "London",
        "sys": {"country": "GB"},
        "main": {"temp": 18.4, "feels_like": 17.2, "humidity": 72, "pressure": 1012},
        "wind": {"speed": 4.1},
        "weather": [{"description": "light rain", "icon": "10d"}],
    }


@pytest.fixture
def forecast_payload():
    return {
        "list": [
            {
                "dt": 1714564800 + i * 10800,
                "main": {"temp": 10.0 + i},
                "weather": [{"description": f"slot {i}"}],
            }
            for i in range(40)
        ]
    }


@pytest.fixture
def air_payload():
    return {
        "list": [{
            "main": {"aqi": 2},
            "components": {"pm2_5": 5.6, "pm10": 9.4, "o3": 61.2},
        }]
    }


@pytest.fixture
def geodb_city():
    return {
        "name": "London",
        "country": "United Kingdom",
        "countryCode": "GB",
        "population": 8908081,
        "latitude": 51.507222222,
        "longitude": -0.1275,
        "timezone": "Europe__London",
        "elevationMeters": 11,
        "wikiDataId": "Q84",
    }


@pytest.fixture
def unsplash_photo():
    return {
        "id": "abc123",
        "description": None,
        "alt_description": "Tower Bridge at dusk",
        "urls": {
            "small": "https://images.example/small.jpg",
            "regular": "https://images.example/regular.jpg",
            "full": "https://images.example/full.jpg",
        },
        "user": {
            "name": "Jane Doe",
            "username": "janedoe",
            "links": {"html": "https://unsplash.com/@janedoe"},
        },
        "links": {"download_location": "https://api.unsplash.com/photos/abc123/download"},
    }
