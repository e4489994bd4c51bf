"""CLI entry point for the weather server."""

import argparse
import asyncio
import logging

from weatherserver.config.defaults import SAMPLE_LAT, SAMPLE_LON
from weatherserver.config.loader import config_hash, get_config_value, load_config
from weatherserver.config.schema import ServiceConfig
from weatherserver.ingest.resolver import ForecastResolver, build_client
from weatherserver.pipeline.request_pipeline import (
    ClientInputError,
    RequestPipeline,
    ResolutionFailed,
    parse_coordinates,
)
from weatherserver.service import WeatherService

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherserver",
        description="Plain-text weather.gov forecasts by coordinates",
    )
    parser.add_argument("--config", default=None, help="Config YAML path")

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP server")
    serve_p.add_argument("--host", default=None, help="Bind host")
    serve_p.add_argument("--port", type=int, default=None, help="Bind port")

    # forecast
    fc_p = sub.add_parser("forecast", help="Print one forecast summary")
    fc_p.add_argument("--lat", required=True, help="Latitude")
    fc_p.add_argument("--lon", required=True, help="Longitude")

    # config show
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    show_p = config_sub.add_parser("show", help="Display current config")
    show_p.add_argument("key", nargs="?", help="Dotted key, e.g. upstream.base_url")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.config)

    logging.basicConfig(
        level=config.logging.level.upper(),
        format=config.logging.format,
    )

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "forecast":
        return _cmd_forecast(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_serve(config: ServiceConfig, args) -> int:
    host = args.host or config.server.host
    port = config.server.port if args.port is None else args.port
    logger.info("Config %s", config_hash(config))

    service = WeatherService(config)
    service.install_signal_handlers()

    print(
        "Use SIGINT/Ctrl-C to stop.\n"
        "For example, run the following for Kansas City weather\n"
        f"\tcurl 'http://{host}:{port}/weather?lat={SAMPLE_LAT}&lon={SAMPLE_LON}'"
    )
    service.start(host, port)
    return 0


def _cmd_forecast(config: ServiceConfig, args) -> int:
    try:
        coords = parse_coordinates({"lat": args.lat, "lon": args.lon})
    except ClientInputError as e:
        print(f"Error: {e.message}")
        return 1

    try:
        summary = asyncio.run(_summarize(config, coords))
    except ResolutionFailed as e:
        print(f"Error: {e}")
        return 1

    print(summary, end="")
    return 0


async def _summarize(config: ServiceConfig, coords) -> str:
    upstream = config.upstream
    async with build_client(upstream) as client:
        resolver = ForecastResolver(client, upstream.base_url, upstream.accept)
        pipeline = RequestPipeline(resolver, upstream.deadline_seconds)
        return await pipeline.summarize(coords)


def _cmd_config(config: ServiceConfig, args) -> int:
    if args.config_command != "show":
        print("Usage: config show [KEY]")
        return 1
    if args.key is None:
        print(config.model_dump_json(indent=2))
        return 0
    try:
        value = get_config_value(config, args.key)
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        return 1
    print(value)
    return 0
