"""Upstream fetcher: one GET against a weather.gov style JSON-LD endpoint."""

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

LD_JSON = "application/ld+json"

ShapeT = TypeVar("ShapeT", bound=BaseModel)


class UpstreamError(Exception):
    """Base class for failures talking to the upstream weather API."""


class UpstreamTransportError(UpstreamError):
    """Connection failed, timed out, or the upstream answered with a non-200."""


class UpstreamTimeoutError(UpstreamTransportError):
    pass


class UpstreamStatusError(UpstreamTransportError):
    def __init__(self, status_code: int):
        super().__init__(f"unexpected status code: {status_code}")
        self.status_code = status_code


class UpstreamBodyError(UpstreamTransportError):
    pass


class UpstreamDataError(UpstreamError):
    """The upstream answered 200 but the payload is unusable."""


class UpstreamDecodeError(UpstreamDataError):
    pass


async def fetch_document(
    client: httpx.AsyncClient,
    url: str,
    shape: type[ShapeT],
    accept: str = LD_JSON,
) -> ShapeT:
    """GET ``url`` and decode the JSON body into ``shape``.

    The caller owns the deadline: wrap the call in ``asyncio.timeout`` and the
    in-flight request is cancelled when it expires. The response stream is
    always closed before returning or raising.
    """
    try:
        async with client.stream("GET", url, headers={"Accept": accept}) as resp:
            if resp.status_code != 200:
                logger.warning("GET %s returned %d", url, resp.status_code)
                raise UpstreamStatusError(resp.status_code)
            try:
                body = await resp.aread()
            except httpx.TimeoutException:
                raise
            except httpx.TransportError as e:
                raise UpstreamBodyError(f"failed to read body: {e}") from e
    except httpx.TimeoutException as e:
        logger.warning("GET %s timed out: %s", url, e)
        raise UpstreamTimeoutError(f"request timed out: {e}") from e
    except httpx.RequestError as e:
        logger.warning("GET %s failed: %s", url, e)
        raise UpstreamTransportError(f"request failed: {e}") from e

    try:
        return shape.model_validate_json(body)
    except ValidationError as e:
        logger.warning("GET %s returned an undecodable body", url)
        raise UpstreamDecodeError(f"failed to unmarshal body: {e}") from e
