"""Tests for the two-step forecast resolver against a stand-in upstream."""

import asyncio

import httpx
import pytest
import respx

from weatherserver.config.schema import UpstreamConfig
from weatherserver.ingest.fetcher import UpstreamDataError, UpstreamStatusError
from weatherserver.ingest.resolver import (
    ForecastResolver,
    MissingEndpointError,
    NoForecastDataError,
    build_client,
)
from weatherserver.models.forecast import ForecastPeriod

TEST_BASE_URL = "https://test-nws.example.com"
KC_LAT = 39.0997
KC_LON = -94.5786
KC_POINTS_URL = f"{TEST_BASE_URL}/points/39.099700,-94.578600"
KC_FORECAST_URL = "https://api.weather.gov/gridpoints/EAX/44,51/forecast"


def _run(step):
    async def run():
        async with httpx.AsyncClient() as client:
            return await step(ForecastResolver(client, TEST_BASE_URL))

    return asyncio.run(run())


class TestResolveEndpoint:
    def test_points_url_uses_six_decimals(self):
        resolver = ForecastResolver(httpx.AsyncClient(), TEST_BASE_URL + "/")
        assert resolver.points_url(KC_LAT, KC_LON) == KC_POINTS_URL

    @respx.mock
    def test_known_coordinates(self, points_payload: dict):
        respx.get(KC_POINTS_URL).mock(
            return_value=httpx.Response(200, json=points_payload)
        )
        endpoint = _run(lambda r: r.resolve_endpoint(KC_LAT, KC_LON))
        assert endpoint == KC_FORECAST_URL

    @respx.mock
    def test_missing_forecast_field(self):
        respx.get(KC_POINTS_URL).mock(
            return_value=httpx.Response(200, json={"gridId": "EAX"})
        )
        with pytest.raises(MissingEndpointError):
            _run(lambda r: r.resolve_endpoint(KC_LAT, KC_LON))

    @respx.mock
    def test_empty_forecast_field(self):
        respx.get(KC_POINTS_URL).mock(
            return_value=httpx.Response(200, json={"forecast": ""})
        )
        with pytest.raises(UpstreamDataError):
            _run(lambda r: r.resolve_endpoint(KC_LAT, KC_LON))

    @respx.mock
    def test_upstream_error_propagates(self):
        respx.get(KC_POINTS_URL).mock(return_value=httpx.Response(500))
        with pytest.raises(UpstreamStatusError):
            _run(lambda r: r.resolve_endpoint(KC_LAT, KC_LON))


class TestResolveForecast:
    @respx.mock
    def test_first_period_only(self, forecast_payload: dict):
        respx.get(KC_FORECAST_URL).mock(
            return_value=httpx.Response(200, json=forecast_payload)
        )
        period = _run(lambda r: r.resolve_forecast(KC_FORECAST_URL))
        assert period == ForecastPeriod(short_forecast="Sunny", temperature=72)

    @respx.mock
    def test_empty_periods(self):
        respx.get(KC_FORECAST_URL).mock(
            return_value=httpx.Response(200, json={"periods": []})
        )
        with pytest.raises(NoForecastDataError, match="no periods found"):
            _run(lambda r: r.resolve_forecast(KC_FORECAST_URL))

    @respx.mock
    def test_missing_periods(self):
        respx.get(KC_FORECAST_URL).mock(return_value=httpx.Response(200, json={}))
        with pytest.raises(UpstreamDataError):
            _run(lambda r: r.resolve_forecast(KC_FORECAST_URL))

    @respx.mock
    def test_null_fields_decode_as_zero_values(self):
        respx.get(KC_FORECAST_URL).mock(
            return_value=httpx.Response(200, json={
                "periods": [{"temperature": None, "shortForecast": "Sunny"}]
            })
        )
        period = _run(lambda r: r.resolve_forecast(KC_FORECAST_URL))
        assert period == ForecastPeriod(short_forecast="Sunny", temperature=0.0)

        respx.get(KC_FORECAST_URL).mock(
            return_value=httpx.Response(200, json={
                "periods": [{"temperature": 85, "shortForecast": None}]
            })
        )
        period = _run(lambda r: r.resolve_forecast(KC_FORECAST_URL))
        assert period == ForecastPeriod(short_forecast="", temperature=85)

    @respx.mock
    def test_celsius_passed_through(self):
        respx.get(KC_FORECAST_URL).mock(
            return_value=httpx.Response(200, json={
                "periods": [
                    {"temperature": 22, "temperatureUnit": "C", "shortForecast": "Clear"}
                ]
            })
        )
        period = _run(lambda r: r.resolve_forecast(KC_FORECAST_URL))
        assert period.temperature == 22


class TestBuildClient:
    def test_user_agent_and_redirects(self):
        client = build_client(UpstreamConfig(user_agent="wx-test/1.0"))
        assert client.headers["user-agent"] == "wx-test/1.0"
        assert client.follow_redirects is True
        assert client.timeout.read == 2.0

    @respx.mock
    def test_follows_points_redirect(self, points_payload: dict):
        # The points API redirects over-precise coordinates to 4 decimals
        short_url = f"{TEST_BASE_URL}/points/39.0997,-94.5786"
        respx.get(KC_POINTS_URL).mock(
            return_value=httpx.Response(301, headers={"Location": short_url})
        )
        respx.get(short_url).mock(return_value=httpx.Response(200, json=points_payload))

        async def run():
            async with build_client(UpstreamConfig(base_url=TEST_BASE_URL)) as client:
                return await ForecastResolver(client, TEST_BASE_URL).resolve_endpoint(
                    KC_LAT, KC_LON
                )

        assert asyncio.run(run()) == KC_FORECAST_URL
