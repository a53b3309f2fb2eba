"""Discord-facing adapters."""

from discord_mcp.discord.client import (
    DiscordClientService,
    DiscordStartupError,
    build_intents,
)
from discord_mcp.discord.directory import (
    DiscordDirectory,
    channel_kind_of,
    to_channel,
    to_message,
    to_server,
    to_thread,
)

__all__ = [
    "DiscordClientService",
    "DiscordDirectory",
    "DiscordStartupError",
    "build_intents",
    "channel_kind_of",
    "to_channel",
    "to_message",
    "to_server",
    "to_thread",
]
