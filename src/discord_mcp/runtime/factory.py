"""Factory for wiring up the complete discord-mcp runtime."""

from __future__ import annotations

from typing import Mapping, Optional
import logging

from discord_mcp.activity.scanner import ActivityScanner
from discord_mcp.config.settings import AppSettings, resolve_env_secret
from discord_mcp.directory import Directory
from discord_mcp.discord.client import DiscordClientService
from discord_mcp.runtime.app import RuntimeApp
from discord_mcp.tools.dispatch import ToolDispatcher
from discord_mcp.tools.handlers import ToolHandlers
from discord_mcp.tools.server import build_server, serve_stdio


def create_dispatcher(
    settings: AppSettings,
    directory: Directory,
    *,
    logger: Optional[logging.Logger] = None,
) -> ToolDispatcher:
    """Wire resolvers, scanner and handlers over a directory."""

    _logger = logger or logging.getLogger("discord_mcp.factory")
    scanner = ActivityScanner(
        directory,
        concurrency=settings.scan.concurrency,
        logger=logging.getLogger("discord_mcp.activity"),
    )
    handlers = ToolHandlers(directory, scanner=scanner)
    return ToolDispatcher(handlers, logger=_logger)


def create_runtime(
    settings: AppSettings,
    *,
    environ: Optional[Mapping[str, str]] = None,
    logger: Optional[logging.Logger] = None,
) -> RuntimeApp:
    """Create the Discord service and the MCP server bound to its cache."""

    _logger = logger or logging.getLogger("discord_mcp.factory")

    bot_token = resolve_env_secret(settings.discord.token_env, environ)
    discord_service = DiscordClientService(
        bot_token=bot_token,
        ready_timeout_seconds=settings.discord.ready_timeout_seconds,
    )

    dispatcher = create_dispatcher(settings, discord_service.directory, logger=_logger)
    server = build_server(dispatcher, name=settings.server.name)
    _logger.info(
        "MCP server '%s' configured with tools=%s",
        settings.server.name,
        [spec.name for spec in dispatcher.tools()],
    )

    async def serve() -> None:
        await serve_stdio(server)

    return RuntimeApp(
        settings=settings,
        services=[discord_service],
        serve=serve,
        logger=_logger,
    )
