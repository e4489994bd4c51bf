"""FastAPI app serving plain-text forecasts at /weather."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from weatherserver.config.schema import ServiceConfig
from weatherserver.ingest.resolver import ForecastResolver, build_client
from weatherserver.pipeline.request_pipeline import RequestPipeline

logger = logging.getLogger(__name__)


def create_app(config: ServiceConfig, client: httpx.AsyncClient | None = None) -> FastAPI:
    """Build the app. An injected client is used as-is and never closed here."""
    upstream = config.upstream

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = client is None
        http = build_client(upstream) if owned else client
        resolver = ForecastResolver(http, upstream.base_url, upstream.accept)
        app.state.pipeline = RequestPipeline(resolver, upstream.deadline_seconds)
        logger.info(
            "Upstream %s, deadline %.1fs", upstream.base_url, upstream.deadline_seconds
        )
        try:
            yield
        finally:
            if owned:
                await http.aclose()

    app = FastAPI(
        title="weatherserver",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    async def weather(request: Request) -> PlainTextResponse:
        pipeline: RequestPipeline = request.app.state.pipeline
        # First value wins for repeated keys
        query = {key: request.query_params.getlist(key)[0] for key in request.query_params.keys()}
        try:
            reply = await pipeline.handle(
                request.method,
                request.url.path,
                request.headers.get("accept"),
                query,
            )
        except Exception:
            logger.exception("Unhandled error for %s %s", request.method, request.url.path)
            raise
        # Starlette fills in content-length from the encoded body
        return PlainTextResponse(
            reply.content, status_code=reply.status_code, headers=reply.headers
        )

    # No method filter: every method reaches the pipeline, which answers 405 itself
    app.add_route("/{path:path}", weather)

    return app
