"""Channel resolution within a resolved server."""

from __future__ import annotations

from typing import Optional
import logging

from discord_mcp.directory import Channel, Directory, Server, parse_snowflake
from discord_mcp.errors import AmbiguousChannelError, ChannelNotFoundError


class ChannelResolver:
    """Resolves a channel id or ``#name`` to one text, news or forum channel."""

    def __init__(self, directory: Directory, logger: Optional[logging.Logger] = None) -> None:
        self._directory = directory
        self._logger = logger or logging.getLogger("discord_mcp.resolution.channels")

    async def resolve(self, server: Server, identifier: str) -> Channel:
        normalized = identifier.strip()

        channel_id = parse_snowflake(normalized)
        if channel_id is not None:
            fetched = await self._fetch_by_id(server, channel_id)
            if fetched is not None:
                return fetched

        wanted = normalized.lower()
        bare = wanted[1:] if wanted.startswith("#") else wanted
        candidates = [
            channel
            for channel in self._directory.list_channels(server)
            if channel.kind.is_text_capable
        ]
        matches = [
            channel
            for channel in candidates
            if channel.name.lower() in (wanted, bare)
        ]

        if not matches:
            names = [f"#{channel.name}" for channel in candidates]
            available = ", ".join(f'"{name}"' for name in names)
            raise ChannelNotFoundError(
                f'Channel "{normalized}" not found in server "{server.name}". '
                f"Available channels: {available}",
                candidates=names,
            )
        if len(matches) > 1:
            pairs = [(channel.name, channel.id) for channel in matches]
            listing = ", ".join(f"#{name} ({match_id})" for name, match_id in pairs)
            raise AmbiguousChannelError(
                f'Multiple channels found with name "{normalized}" in server '
                f'"{server.name}": {listing}. Please specify the channel ID.',
                candidates=pairs,
            )
        return matches[0]

    async def _fetch_by_id(self, server: Server, channel_id: int) -> Optional[Channel]:
        try:
            channel = await self._directory.fetch_channel(channel_id)
        except Exception as exc:
            self._logger.debug("Channel id lookup failed for %s: %s", channel_id, exc)
            return None

        if channel.server_id != server.id:
            self._logger.debug(
                "Channel %s belongs to server %s, not %s.",
                channel_id,
                channel.server_id,
                server.id,
            )
            return None
        if not channel.kind.is_text_capable:
            self._logger.debug("Channel %s has kind %s; not addressable.", channel_id, channel.kind.value)
            return None
        return channel
