"""Server (guild) resolution against the connected set."""

from __future__ import annotations

from typing import Optional, Sequence
import logging

from discord_mcp.directory import Directory, Server, parse_snowflake
from discord_mcp.errors import AmbiguousServerError, ServerNotFoundError


class GuildResolver:
    """Resolves a human-supplied server name or id to exactly one server."""

    def __init__(self, directory: Directory, logger: Optional[logging.Logger] = None) -> None:
        self._directory = directory
        self._logger = logger or logging.getLogger("discord_mcp.resolution.guilds")

    async def resolve(self, identifier: Optional[str] = None) -> Server:
        servers = list(self._directory.list_servers())
        if identifier is None:
            if len(servers) == 1:
                return servers[0]
            if not servers:
                raise ServerNotFoundError("Bot is not connected to any servers.")
            names = [server.name for server in servers]
            raise AmbiguousServerError(
                "Bot is in multiple servers. Please specify server name or ID. "
                f"Available servers: {_quoted(names)}",
                candidates=names,
            )

        normalized = identifier.strip()
        server_id = parse_snowflake(normalized)
        if server_id is not None:
            try:
                return await self._directory.fetch_server(server_id)
            except Exception as exc:
                self._logger.debug("Server id lookup failed for %s: %s", server_id, exc)

        lowered = normalized.lower()
        matches = [server for server in servers if server.name.lower() == lowered]
        if not matches:
            names = [server.name for server in servers]
            raise ServerNotFoundError(
                f'Server "{normalized}" not found. Available servers: {_quoted(names)}',
                candidates=names,
            )
        if len(matches) > 1:
            pairs = [(server.name, server.id) for server in matches]
            listing = ", ".join(f"{name} (ID: {match_id})" for name, match_id in pairs)
            raise AmbiguousServerError(
                f'Multiple servers found with name "{normalized}": {listing}. '
                "Please specify the server ID.",
                candidates=pairs,
            )
        return matches[0]


def _quoted(names: Sequence[str]) -> str:
    return ", ".join(f'"{name}"' for name in names)
