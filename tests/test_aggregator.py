"""Client aggregator: partial success, weather-required policy, render-time units."""

import threading
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from aggregator import (
    CELSIUS, FAHRENHEIT, ApiError, DisplayModel, SearchError, WeatherHubClient,
    convert_temperature, daily_forecasts, format_number, temperature_symbol,
)


def _response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.json.return_value = body or {}
    return resp


@pytest.fixture
def weather_body(current_payload, forecast_payload, air_payload):
    return {
        "current": current_payload,
        "forecast": forecast_payload,
        "airQuality": air_payload,
        "coordinates": {"lat": 51.5, "lon": -0.1},
    }


@pytest.fixture
def city_body():
    return {
        "name": "London", "country": "United Kingdom", "countryCode": "GB",
        "population": 8908081, "latitude": 51.507222, "longitude": -0.1275,
        "timezone": "Europe__London", "elevationMeters": 11, "wikiDataId": "Q84",
    }


@pytest.fixture
def image_body():
    return {"id": "abc", "urls": {"regular": "https://images.example/regular.jpg"}}


def _session(routes):
    """Session mock answering by endpoint name; values are responses or exceptions."""
    session = MagicMock()

    def get(url, params=None, timeout=None):
        outcome = routes[url.rsplit("/", 1)[-1]]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    session.get.side_effect = get
    return session


class TestUnits:
    def test_celsius_rounds(self):
        assert convert_temperature(18.4) == 18
        assert convert_temperature(18.6, CELSIUS) == 19

    def test_fahrenheit_converts(self):
        assert convert_temperature(0, FAHRENHEIT) == 32
        assert convert_temperature(100, FAHRENHEIT) == 212
        assert convert_temperature(-40, FAHRENHEIT) == -40

    def test_symbols(self):
        assert temperature_symbol(CELSIUS) == "°C"
        assert temperature_symbol(FAHRENHEIT) == "°F"

    def test_halves_round_up(self):
        assert convert_temperature(20.5, CELSIUS) == 21
        assert convert_temperature(-0.5, CELSIUS) == 0
        assert convert_temperature(-17.5, FAHRENHEIT) == 1

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValueError):
            convert_temperature(10, "kelvin")


class TestHelpers:
    def test_format_number(self):
        assert format_number(8908081) == "8,908,081"

    def test_daily_forecasts_takes_every_eighth(self):
        entries = list(range(40))
        assert daily_forecasts(entries) == [0, 8, 16, 24, 32]
        assert daily_forecasts(entries[:10]) == [0, 8]


class TestSearch:
    def test_all_succeed(self, weather_body, city_body, image_body):
        client = WeatherHubClient(base_url="http://hub/api", session=_session({
            "weather": _response(body=weather_body),
            "city": _response(body=city_body),
            "image": _response(body=image_body),
        }))
        model = client.search("London", "GB")
        assert model.weather == weather_body
        assert model.city_info == city_body
        assert model.image == image_body

    def test_sends_city_and_country(self, weather_body):
        session = _session({
            "weather": _response(body=weather_body),
            "city": _response(body={}),
            "image": _response(body={}),
        })
        WeatherHubClient(base_url="http://hub/api", session=session).search("London", "GB")
        for call in session.get.call_args_list:
            assert call.kwargs["params"] == {"city": "London", "country": "GB"}

    def test_city_and_image_failures_are_tolerated(self, weather_body):
        client = WeatherHubClient(base_url="http://hub/api", session=_session({
            "weather": _response(body=weather_body),
            "city": _response(404, {"error": "City not found", "message": "City not found"}),
            "image": requests.ConnectionError("refused"),
        }))
        model = client.search("London")
        assert model.city_info is None
        assert model.image is None
        view = model.render()
        assert view["city"] is None
        assert view["hero"]["image_url"] is None

    def test_weather_failure_raises_search_error(self, city_body, image_body):
        client = WeatherHubClient(base_url="http://hub/api", session=_session({
            "weather": _response(404, {"message": "Please check the city name and try again"}),
            "city": _response(body=city_body),
            "image": _response(body=image_body),
        }))
        with pytest.raises(SearchError, match="Unable to fetch weather data"):
            client.search("Atlantis")

    def test_fetch_raises_api_error_with_server_message(self):
        client = WeatherHubClient(base_url="http://hub/api", session=_session({
            "city": _response(500, {"message": "GeoDB request failed with status code 429"}),
        }))
        with pytest.raises(ApiError) as exc_info:
            client.fetch_city("London")
        assert exc_info.value.message == "GeoDB request failed with status code 429"
        assert exc_info.value.status_code == 500

    def test_retry_replays_last_search(self, weather_body):
        session = _session({
            "weather": _response(body=weather_body),
            "city": _response(body={}),
            "image": _response(body={}),
        })
        client = WeatherHubClient(base_url="http://hub/api", session=session)
        client.search("London", "GB")
        client.retry()
        assert session.get.call_count == 6
        assert session.get.call_args.kwargs["params"] == {"city": "London", "country": "GB"}

    def test_calls_are_issued_concurrently(self, weather_body):
        barrier = threading.Barrier(3, timeout=5)
        bodies = {"weather": weather_body, "city": {}, "image": {}}
        session = MagicMock()

        def get(url, params=None, timeout=None):
            # each call blocks until all three are in flight
            barrier.wait()
            return _response(body=bodies[url.rsplit("/", 1)[-1]])

        session.get.side_effect = get
        model = WeatherHubClient(base_url="http://hub/api", session=session).search("London")
        assert model.weather == weather_body
        assert session.get.call_count == 3

    def test_retry_without_search(self):
        with pytest.raises(SearchError):
            WeatherHubClient(session=MagicMock()).retry()


class TestRender:
    @pytest.fixture
    def model(self, weather_body, city_body, image_body):
        return DisplayModel(city="London", country="GB", weather=weather_body,
                            city_info=city_body, image=image_body)

    def test_celsius_view(self, model):
        view = model.render(CELSIUS)
        assert view["hero"]["title"] == "London"
        assert view["hero"]["temperature"] == "18°C"
        assert view["weather"]["feels_like"] == "17°C"
        assert view["weather"]["icon"] == "\U0001f326️"
        assert view["weather"]["humidity"] == "72%"
        assert view["share_text"] == "Weather in London: 18°C, light rain"

    def test_fahrenheit_view_converts_stored_celsius(self, model, weather_body):
        view = model.render(FAHRENHEIT)
        assert view["hero"]["temperature"] == "65°F"
        assert view["forecast"][0]["temperature"] == "50°F"
        # stored data is untouched
        assert weather_body["current"]["main"]["temp"] == 18.4

    def test_air_quality_card(self, model):
        card = model.render()["air_quality"]
        assert card["aqi"] == 2
        assert card["level"] == "Fair"
        assert card["pm2_5"] == "6 μg/m³"

    def test_air_quality_absent(self, model):
        model.weather["airQuality"] = None
        assert model.render()["air_quality"] is None

    def test_city_card(self, model):
        card = model.render()["city"]
        assert card["population"] == "8,908,081"
        assert card["elevation"] == "11 m"
        assert card["coordinates"] == "51.51, -0.13"

    def test_missing_weather_details_render_na(self, model):
        del model.weather["current"]["main"]["humidity"]
        del model.weather["current"]["main"]["pressure"]
        model.weather["current"]["wind"] = {}
        card = model.render()["weather"]
        assert card["humidity"] == "N/A"
        assert card["pressure"] == "N/A"
        assert card["wind_speed"] == "N/A"

    def test_air_quality_halves_round_up(self, model):
        model.weather["airQuality"]["list"][0]["components"]["pm10"] = 4.5
        assert model.render()["air_quality"]["pm10"] == "5 μg/m³"

    def test_forecast_weekday_in_local_time(self, model):
        first = model.weather["forecast"]["list"][0]["dt"]
        forecast = model.render()["forecast"]
        assert forecast[0]["day"] == datetime.fromtimestamp(first).strftime("%a")

    def test_forecast_has_five_days(self, model):
        forecast = model.render()["forecast"]
        assert len(forecast) == 5
        assert forecast[1]["temperature"] == "18°C"
        assert forecast[1]["description"] == "slot 8"
