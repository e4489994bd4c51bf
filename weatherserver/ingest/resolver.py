"""weather.gov forecast resolver: coordinates -> grid endpoint -> first period."""

import logging

import httpx

from weatherserver.config.defaults import DEFAULT_BASE_URL
from weatherserver.config.schema import UpstreamConfig
from weatherserver.ingest.fetcher import LD_JSON, UpstreamDataError, fetch_document
from weatherserver.models.forecast import ForecastPayload, ForecastPeriod, PointsPayload

logger = logging.getLogger(__name__)

POINTS_PATH = "/points/{lat:f},{lon:f}"


class MissingEndpointError(UpstreamDataError):
    pass


class NoForecastDataError(UpstreamDataError):
    pass


def build_client(upstream: UpstreamConfig) -> httpx.AsyncClient:
    """Shared connection pool for all requests.

    The transport timeout matches the request deadline so a single call can
    never outlive the budget the pipeline enforces around both calls.
    """
    return httpx.AsyncClient(
        headers={"User-Agent": upstream.user_agent},
        timeout=upstream.deadline_seconds,
        follow_redirects=upstream.follow_redirects,
    )


class ForecastResolver:
    """Two chained weather.gov lookups sharing the caller's deadline.

    Neither method sets its own timeout. Run both inside one
    ``asyncio.timeout`` scope so the second call gets whatever the first one
    left over.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_BASE_URL,
        accept: str = LD_JSON,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.accept = accept

    def points_url(self, lat: float, lon: float) -> str:
        return self.base_url + POINTS_PATH.format(lat=lat, lon=lon)

    async def resolve_endpoint(self, lat: float, lon: float) -> str:
        """Return the gridpoint forecast URL for a coordinate pair."""
        payload = await fetch_document(
            self.client, self.points_url(lat, lon), PointsPayload, self.accept
        )
        if not payload.forecast:
            raise MissingEndpointError("no forecast endpoint in points response")
        logger.debug("Resolved %f,%f to %s", lat, lon, payload.forecast)
        return payload.forecast

    async def resolve_forecast(self, endpoint: str) -> ForecastPeriod:
        """Fetch a gridpoint forecast and return its first period.

        Temperature is assumed to be Fahrenheit; other units are passed
        through unconverted.
        """
        payload = await fetch_document(
            self.client, endpoint, ForecastPayload, self.accept
        )
        if not payload.periods:
            raise NoForecastDataError("no periods found")

        first = payload.periods[0]
        if first.temperature_unit != "F":
            logger.warning(
                "Forecast %s reports temperatureUnit=%s, treating as F",
                endpoint, first.temperature_unit,
            )
        return ForecastPeriod(
            short_forecast=first.short_forecast,
            temperature=first.temperature,
        )
