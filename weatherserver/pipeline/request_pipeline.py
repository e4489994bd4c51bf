"""Request pipeline: validate, resolve under one deadline, render plain text.

Each request runs the same fixed sequence and stops at the first failure:

    1. method / path / accept checks          -> 405 / 404 / 406
    2. lat / lon query parsing                -> 400
    3. open the deadline scope
    4. resolve endpoint, then forecast         -> 500 on any upstream error
    5. temperature -> comfort category
    6. "<shortForecast>, <category>\\n"

Nothing is cached or retried between or within requests.
"""

import asyncio
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from weatherserver.ingest.fetcher import UpstreamError
from weatherserver.ingest.resolver import ForecastResolver
from weatherserver.models.comfort import categorize

logger = logging.getLogger(__name__)

WEATHER_PATH = "/weather"
ACCEPTED_TYPES = frozenset({"*/*", "text/*", "text/plain"})
TEXT_PLAIN = "text/plain"


class ClientInputError(Exception):
    """The inbound request is unusable. Always a 4xx."""

    def __init__(self, status_code: int, message: str, headers: dict[str, str] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.headers = headers or {}


class ResolutionFailed(Exception):
    """An upstream step failed or the shared deadline ran out."""

    def __init__(self, stage: str, detail: str):
        super().__init__(f"failed to fetch weather.gov {stage}: {detail}")
        self.stage = stage
        self.detail = detail


@dataclass(frozen=True)
class PlainReply:
    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def content(self) -> bytes:
        return self.body.encode("utf-8")


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


def accepts_plain_text(accept: str | None) -> bool:
    """True if the Accept header is absent or names a plain-text-compatible range."""
    if accept is None or not accept.strip():
        return True
    for media_range in accept.split(","):
        media_type, *params = [part.strip() for part in media_range.split(";")]
        if media_type.lower() in ACCEPTED_TYPES and _quality(params) > 0:
            return True
    return False


def _quality(params: list[str]) -> float:
    """The q value of a media range; missing or unparseable means 1."""
    for param in params:
        name, _, value = param.partition("=")
        if name.strip().lower() == "q":
            try:
                return float(value.strip())
            except ValueError:
                return 1.0
    return 1.0


def validate_request(method: str, path: str, accept: str | None) -> None:
    if method.upper() != "GET":
        raise ClientInputError(405, "only GET allowed", {"Allow": "GET"})
    if path != WEATHER_PATH:
        raise ClientInputError(404, f"only {WEATHER_PATH} allowed")
    if not accepts_plain_text(accept):
        raise ClientInputError(406, "must accept text/plain")


def _parse_coordinate(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as e:
        raise ClientInputError(400, f"invalid '{name}' query param: {e}") from e
    if not math.isfinite(value):
        raise ClientInputError(
            400, f"invalid '{name}' query param: {raw!r} is not a finite number"
        )
    return value


def parse_coordinates(query: Mapping[str, str]) -> Coordinates:
    lat_raw = query.get("lat", "")
    lon_raw = query.get("lon", "")
    if not lat_raw or not lon_raw:
        raise ClientInputError(400, "query params 'lat' and 'lon' are required")
    return Coordinates(
        lat=_parse_coordinate("lat", lat_raw),
        lon=_parse_coordinate("lon", lon_raw),
    )


def render_summary(short_forecast: str, temperature: float) -> str:
    return f"{short_forecast}, {categorize(temperature)}\n"


def _error_reply(status_code: int, message: str, headers: dict[str, str] | None = None) -> PlainReply:
    return PlainReply(status_code, message + "\n", dict(headers or {}))


class RequestPipeline:
    def __init__(self, resolver: ForecastResolver, deadline_seconds: float):
        self.resolver = resolver
        self.deadline_seconds = deadline_seconds

    async def summarize(self, coords: Coordinates) -> str:
        """Run both upstream steps under one deadline and return the summary line."""
        stage = "points"
        try:
            async with asyncio.timeout(self.deadline_seconds):
                endpoint = await self.resolver.resolve_endpoint(coords.lat, coords.lon)
                stage = "forecast"
                period = await self.resolver.resolve_forecast(endpoint)
        except TimeoutError as e:
            raise ResolutionFailed(
                stage, f"deadline of {self.deadline_seconds:g}s exceeded"
            ) from e
        except UpstreamError as e:
            raise ResolutionFailed(stage, str(e)) from e
        return render_summary(period.short_forecast, period.temperature)

    async def handle(
        self,
        method: str,
        path: str,
        accept: str | None,
        query: Mapping[str, str],
    ) -> PlainReply:
        try:
            validate_request(method, path, accept)
            coords = parse_coordinates(query)
        except ClientInputError as e:
            logger.info("Rejected %s %s: %d %s", method, path, e.status_code, e.message)
            return _error_reply(e.status_code, e.message, e.headers)

        try:
            summary = await self.summarize(coords)
        except ResolutionFailed as e:
            logger.warning("%s (lat=%f lon=%f)", e, coords.lat, coords.lon)
            return _error_reply(500, str(e))

        return PlainReply(200, summary, {"Content-Type": TEXT_PLAIN})
