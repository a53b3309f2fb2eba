"""Runtime lifecycle wiring for discord-mcp."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol
import asyncio
import logging
import signal

from discord_mcp.config.settings import AppSettings


class RuntimeService(Protocol):
    """Small lifecycle contract used by the runtime host."""

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


Serve = Callable[[], Awaitable[None]]


class RuntimeApp:
    """Starts services, serves until the client disconnects or a signal arrives, then stops."""

    def __init__(
        self,
        settings: AppSettings,
        services: Optional[list[RuntimeService]] = None,
        serve: Optional[Serve] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or logging.getLogger("discord_mcp.runtime")
        self._services = services or []
        self._serve = serve
        self._started: list[RuntimeService] = []

    async def start(self) -> None:
        if self._started:
            return

        for service in self._services:
            try:
                await service.start()
            except Exception:
                await self.stop()
                raise
            self._started.append(service)

    async def stop(self) -> None:
        # Stop services in reverse order
        for service in reversed(self._started):
            try:
                await service.stop()
            except Exception:
                self.logger.exception("Service shutdown failed.")

        self._started = []

    async def run(self, shutdown_event: Optional[asyncio.Event] = None) -> None:
        stop_event = shutdown_event or asyncio.Event()
        added_signals = self._install_signal_handlers(stop_event)

        try:
            await self.start()
            self.logger.info("Runtime started for MCP server '%s'.", self.settings.server.name)
            await self._serve_until(stop_event)
        finally:
            self.logger.info("Runtime shutdown requested.")
            await self.stop()
            self._remove_signal_handlers(added_signals)

    async def _serve_until(self, stop_event: asyncio.Event) -> None:
        waiters = {asyncio.create_task(stop_event.wait())}
        serve_task = None
        if self._serve is not None:
            serve_task = asyncio.create_task(self._serve())
            waiters.add(serve_task)

        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

        if serve_task is not None and not serve_task.cancelled():
            exc = serve_task.exception()
            if exc is not None:
                raise exc

    @staticmethod
    def _install_signal_handlers(stop_event: asyncio.Event) -> list[signal.Signals]:
        loop = asyncio.get_running_loop()
        added = []

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
                added.append(sig)
            except (NotImplementedError, RuntimeError):
                # Signal handlers may be unsupported on some environments.
                break

        return added

    @staticmethod
    def _remove_signal_handlers(signals_to_remove: list[signal.Signals]) -> None:
        loop = asyncio.get_running_loop()

        for sig in signals_to_remove:
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                break


def configure_logging(log_level: str) -> None:
    # basicConfig logs to stderr; stdout carries the MCP stream.
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


async def run_runtime(settings: AppSettings, shutdown_event: Optional[asyncio.Event] = None) -> None:
    from discord_mcp.runtime.factory import create_runtime

    configure_logging(settings.runtime.log_level)
    logger = logging.getLogger("discord_mcp.runtime")

    app = create_runtime(settings, logger=logger)
    await app.run(shutdown_event=shutdown_event)
