"""
Entremetteur - Anonymous 1:1 chat matchmaker

Orchestrates Clean Architecture components: a WebSocket endpoint that
pairs waiting participants and relays their chat traffic.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from entremetteur import __version__
from entremetteur.config.settings import Settings, load_config
from entremetteur.di import Container
from entremetteur.domain.events import ShutdownNoticeEvent
from entremetteur.presentation.api.dependencies import set_container
from entremetteur.presentation.api.middleware import (
    HTTPRateLimitMiddleware,
    MetricsMiddleware,
)
from entremetteur.presentation.api.routes import (
    health_router,
    metrics_router,
    stats_router,
    websocket_router,
)


class EntremetteurApp:
    """
    Entremetteur application orchestrator.

    Builds the container and the FastAPI app, and ties server shutdown
    to the shutdown manager.

    Responsibilities:
        - Initialize DI container
        - Setup FastAPI application (routes, middleware, lifespan)
        - Wire graceful shutdown (notify clients, stop server)
        - Run uvicorn server
    """

    def __init__(
        self,
        settings: Settings,
        container: Optional[Container] = None,
        install_signal_handlers: bool = True,
    ):
        """
        Initialize Entremetteur application.

        Args:
            settings: Application settings
            container: Optional pre-built container (tests)
            install_signal_handlers: Register SIGTERM/SIGINT on startup
        """
        self.settings = settings
        self.install_signal_handlers = install_signal_handlers

        # Initialize reporter FIRST
        self.reporter = container.reporter if container else self._create_reporter()

        self.container = container or Container(settings, reporter=self.reporter)

        self.app = self._create_app()

        # Set global container for FastAPI dependencies
        set_container(self.container)

        # Server instance (set during serve)
        self.server: Optional[uvicorn.Server] = None

        self.reporter.info(
            f"{Emoji.SYSTEM.READY} Entremetteur initialized (env={settings.ENV})",
            context="Entremetteur",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        """Create SystemReporter from logging settings."""
        return SystemReporter(
            name="entremetteur",
            log_dir=self.settings.log_dir,
            level=getattr(logging, self.settings.log_level.upper()),
            verbose=self.settings.log_verbose,
        )

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with lifespan management."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self._on_startup()
            yield
            await self._on_shutdown()

        app = FastAPI(
            title="Entremetteur",
            description="Anonymous one-to-one chat matchmaking server",
            version=__version__,
            lifespan=lifespan,
        )

        # Last added runs first: metrics see rate-limited responses too
        app.add_middleware(
            HTTPRateLimitMiddleware,
            rate_limiter=self.container.http_rate_limiter,
            reporter=self.reporter,
            trust_forwarded_for=self.settings.trust_forwarded_for,
        )
        app.add_middleware(MetricsMiddleware)

        # Outermost, so preflights and 429s carry CORS headers
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

        app.include_router(websocket_router)
        app.include_router(health_router)
        app.include_router(stats_router)
        app.include_router(metrics_router)

        return app

    async def _on_startup(self):
        """Register shutdown handling and log the effective configuration."""
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} Entremetteur starting...",
            context="Entremetteur",
            verbose_level=1,
        )

        shutdown_manager = self.container.shutdown_manager
        if self.install_signal_handlers:
            shutdown_manager.setup_signal_handlers()
        shutdown_manager.register_shutdown_callback(self._graceful_shutdown_callback)

        self.reporter.info(
            f"{Emoji.SYSTEM.CONFIG} Host: {self.settings.host}:{self.settings.port} "
            f"[message_rate={self.settings.message_rate_limit}/"
            f"{self.settings.message_rate_window_seconds}s] "
            f"[http_rate_limit={self.settings.http_rate_limit_enabled}] "
            f"[max_connections={self.settings.max_total_connections or 'unlimited'}] "
            f"[forward_keys_on_pair={self.settings.forward_keys_on_pair}]",
            context="Entremetteur",
            verbose_level=1,
        )

    async def _graceful_shutdown_callback(self):
        """
        Notify every client, wait the grace period, close, stop uvicorn.

        Runs before uvicorn begins its own shutdown, so clients see the
        notice and a 1001 close instead of an abrupt transport close.
        """
        conn_manager = self.container.connection_manager
        notified = conn_manager.broadcast(ShutdownNoticeEvent())

        if notified > 0:
            grace_period = self.container.shutdown_manager.grace_period
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Shutdown notice queued for {notified} "
                f"clients, closing in {grace_period}s",
                context="Entremetteur",
                verbose_level=1,
            )
            await asyncio.sleep(grace_period)
            await conn_manager.close_all(code=1001, reason="Server shutdown")

        if self.server:
            self.server.should_exit = True

    async def _on_shutdown(self):
        """Finish graceful shutdown if no signal started it."""
        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Entremetteur shutting down...",
            context="Entremetteur",
            verbose_level=1,
        )

        shutdown_manager = self.container.shutdown_manager
        await shutdown_manager.initiate_shutdown("lifespan")

        # Sessions opened while the callback was closing the others
        conn_manager = self.container.connection_manager
        if conn_manager.get_total_connections() > 0:
            await conn_manager.close_all(code=1001, reason="Server shutdown")

        if self.install_signal_handlers:
            shutdown_manager.restore_signal_handlers()
        shutdown_manager.mark_shutdown_complete()

        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Entremetteur stopped",
            context="Entremetteur",
            verbose_level=1,
        )

    async def serve(self):
        """
        Run uvicorn until should_exit is set or it stops by itself.

        Keeps the uvicorn.Server so the shutdown callback can stop it.
        """
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level,
            ws_max_size=self.settings.max_message_size,
            ws_ping_interval=self.settings.ws_ping_interval,
            ws_ping_timeout=self.settings.ws_ping_timeout,
            timeout_graceful_shutdown=self.settings.shutdown_timeout,
        )
        self.server = uvicorn.Server(config)
        await self.server.serve()

    def start(self):
        """Run the server in a fresh event loop; returns once it has stopped."""
        asyncio.run(self.serve())


def main():
    """
    Main entry point for Entremetteur.

    Loads configuration and starts the server. An optional first
    argument overrides the port.
    """
    config = load_config()

    if len(sys.argv) > 1:
        try:
            config.port = int(sys.argv[1])
        except ValueError:
            print(f"Invalid port: {sys.argv[1]}")
            sys.exit(1)

    app = EntremetteurApp(config)

    try:
        app.start()
    except KeyboardInterrupt:
        print("\nEntremetteur stopped by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
