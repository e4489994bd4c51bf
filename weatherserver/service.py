"""Lifecycle controller: owns the uvicorn server behind start/stop.

Usage:
    service = WeatherService(config)
    service.install_signal_handlers()
    service.start()          # blocks until stop() or a signal
"""

import logging
import signal
import threading

import uvicorn
from fastapi import FastAPI

from weatherserver.app import create_app
from weatherserver.config.schema import ServiceConfig

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGTERM, signal.SIGINT, signal.SIGQUIT, signal.SIGHUP)


class ServiceAlreadyStarted(RuntimeError):
    pass


class WeatherService:
    """Start/stop for one HTTP listener. Both calls are thread-safe.

    Each instance owns its own listener state, so several services (e.g. in
    tests) can run side by side.
    """

    def __init__(self, config: ServiceConfig, app: FastAPI | None = None):
        self.config = config
        self.app = app or create_app(config)
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._server is not None

    def start(self, host: str | None = None, port: int | None = None) -> None:
        """Listen on host:port and block until stopped.

        Raises ServiceAlreadyStarted if this instance is already serving.
        """
        host = host or self.config.server.host
        port = self.config.server.port if port is None else port

        with self._lock:
            if self._server is not None:
                raise ServiceAlreadyStarted("server already started")
            server = uvicorn.Server(
                uvicorn.Config(
                    self.app,
                    host=host,
                    port=port,
                    log_config=None,
                    access_log=False,
                )
            )
            self._server = server

        logger.info("Listening for connections at %s:%d...", host, port)
        try:
            server.run()
        finally:
            with self._lock:
                if self._server is server:
                    self._server = None
            logger.info("Server on %s:%d stopped", host, port)

    def stop(self) -> None:
        """Ask the running server to exit. No-op if nothing is running."""
        with self._lock:
            server = self._server
            if server is None:
                return
            server.should_exit = True
            self._server = None
        logger.info("Stop requested")

    def install_signal_handlers(self) -> None:
        """Stop on SIGTERM, SIGINT, SIGQUIT and SIGHUP."""
        def _stop(signum: int, frame: object) -> None:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            self.stop()

        for sig in STOP_SIGNALS:
            signal.signal(sig, _stop)
