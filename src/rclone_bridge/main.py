"""Main application entry point."""

import asyncio
import signal
import sys
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web, web_runner

from .config import ConfigManager, ConfigurationError, get_settings
from .core import (
    AlreadyRunningError,
    ConfigError,
    LogStatusReporter,
    SyncContext,
    SyncOrchestrator,
    TargetRunner
)
from .utils.logging import setup_logging, get_logger


class BridgeApp:
    """Host application: exposes sync runs and their status over HTTP."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        orchestrator: Optional[SyncOrchestrator] = None,
        reporter: Optional[LogStatusReporter] = None
    ):
        """Initialize the application.

        Args:
            config_manager: Source of the remotes configuration
            orchestrator: Pre-built orchestrator; one is created from settings when omitted
            reporter: Status sink shared with the orchestrator
        """
        self.settings = get_settings()
        self.logger = get_logger("RcloneBridge")
        self.running = False
        self.web_app: Optional[web.Application] = None
        self.web_runner: Optional[web_runner.AppRunner] = None
        self.started_at: Optional[datetime] = None

        self.config_manager = config_manager or ConfigManager(self.settings.bridge.config_file)
        self.reporter = reporter or LogStatusReporter()
        self.orchestrator = orchestrator or SyncOrchestrator(
            context=SyncContext(
                config=self.config_manager.get_config(),
                local_root=self.settings.bridge.local_root
            ),
            runner=TargetRunner(timeout_seconds=self.settings.bridge.sync_timeout_seconds),
            reporter=self.reporter
        )

    def create_web_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get('/health', self._health_handler)
        app.router.add_get('/status', self._status_handler)
        app.router.add_post('/sync', self._sync_handler)
        return app

    async def startup(self):
        """Application startup."""
        self.logger.info(
            "Starting Rclone Bridge",
            version=self.settings.version,
            environment=self.settings.environment
        )

        self.web_app = self.create_web_app()
        self.web_runner = web_runner.AppRunner(self.web_app)
        await self.web_runner.setup()

        site = web_runner.TCPSite(self.web_runner, self.settings.server.host, self.settings.server.port)
        await site.start()

        self.running = True
        self.started_at = datetime.now(timezone.utc)
        self.logger.info(
            "Rclone Bridge started",
            url=f"http://{self.settings.server.host}:{self.settings.server.port}"
        )

    async def shutdown(self):
        """Application shutdown. A sync in progress is not interrupted."""
        self.logger.info("Shutting down Rclone Bridge")
        self.running = False

        if self.web_runner:
            await self.web_runner.cleanup()
            self.logger.info("Web server stopped")

    async def run(self):
        """Serve until a shutdown signal arrives."""
        await self.startup()

        try:
            while self.running:
                await asyncio.sleep(1)
        finally:
            await self.shutdown()

    async def _health_handler(self, request):
        """Liveness of the server itself; a failed sync does not make it unhealthy."""
        now = datetime.now(timezone.utc)
        uptime = (now - self.started_at).total_seconds() if self.started_at else 0.0

        return web.json_response(
            {
                "status": "healthy" if self.running else "unhealthy",
                "timestamp": now.isoformat(),
                "version": self.settings.version,
                "uptime_seconds": round(uptime, 1),
                "is_syncing": self.orchestrator.is_syncing,
            },
            status=200 if self.running else 503
        )

    async def _status_handler(self, request):
        """Current sync status and configured remotes."""
        config = self.config_manager.get_config()
        status_data = {
            "status": self.reporter.status_text,
            "is_syncing": self.orchestrator.is_syncing,
            "last_message": self.reporter.last_message,
            "remotes": [
                {
                    "name": remote.name,
                    "remote": remote.remote_address,
                    "enable": remote.enable,
                }
                for remote in config.remotes
            ],
            "recent": self.reporter.recent(),
        }
        return web.json_response(status_data)

    async def _sync_handler(self, request):
        """Run a sync over every enabled remote and return the report."""
        try:
            batch = await self.orchestrator.sync_all(self.config_manager.get_config())
        except AlreadyRunningError as e:
            return web.json_response({"error": "already_running", "message": str(e)}, status=409)
        except ConfigError as e:
            return web.json_response({"error": "config", "message": f"sync failed: {e}"}, status=400)

        return web.json_response(batch.to_dict())


def setup_signal_handlers(app: BridgeApp):
    """Stop serving on SIGINT or SIGTERM."""
    def signal_handler(signum, frame):
        app.logger.info("Shutdown signal received", signal=signal.Signals(signum).name)
        app.running = False

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def main():
    """Serve the HTTP status surface."""
    setup_logging()

    app = BridgeApp()
    setup_signal_handlers(app)
    await app.run()


async def run_sync_once(config_manager: Optional[ConfigManager] = None) -> int:
    """Run one batch, print its report and return a process exit status."""
    settings = get_settings()
    config_manager = config_manager or ConfigManager(settings.bridge.config_file)

    try:
        config = config_manager.get_config()
    except ConfigurationError as e:
        print(f"sync failed: {e}", file=sys.stderr)
        return 2

    orchestrator = SyncOrchestrator(
        context=SyncContext(config=config, local_root=settings.bridge.local_root),
        runner=TargetRunner(timeout_seconds=settings.bridge.sync_timeout_seconds),
        reporter=LogStatusReporter()
    )

    try:
        batch = await orchestrator.sync_all()
    except ConfigError as e:
        print(f"sync failed: {e}", file=sys.stderr)
        return 2

    print(batch.render())
    return 0 if batch.all_succeeded else 1


def cli():
    """Console entry point for the server."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        sys.exit(0)


def cli_sync_once():
    """Console entry point for a single sync run."""
    setup_logging()
    sys.exit(asyncio.run(run_sync_once()))


if __name__ == "__main__":
    cli()
